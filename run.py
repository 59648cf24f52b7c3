from app import create_app, db
from app.models import AdminAction, Contest, Entry, Matchup, Pick

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "Contest": Contest,
        "Entry": Entry,
        "Matchup": Matchup,
        "Pick": Pick,
        "AdminAction": AdminAction,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
