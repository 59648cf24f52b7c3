from wtforms import IntegerField, PasswordField, SelectField, StringField
from wtforms.validators import (
    DataRequired,
    Length,
    NumberRange,
    Optional,
    ValidationError,
)

from app.forms import ApiForm
from app.utils.timezone_utils import parse_lock_time


class AdminLoginForm(ApiForm):
    password = PasswordField("Admin password", validators=[DataRequired()])


class RoundSettingsForm(ApiForm):
    current_round_name = StringField(
        "Current round", validators=[DataRequired(), Length(max=50)]
    )
    round_lock = StringField(
        "Lock time",
        description="ISO 8601; times without an offset use the app timezone",
    )

    lock_time = None

    def validate_round_lock(self, field):
        try:
            self.lock_time = parse_lock_time(field.data)
        except ValueError:
            raise ValidationError("Not a valid date and time")


class MatchupForm(ApiForm):
    game_order = IntegerField("Game order", validators=[Optional(), NumberRange(min=1)])
    team_a = StringField("Team A", validators=[Optional(), Length(max=80)])
    team_b = StringField("Team B", validators=[Optional(), Length(max=80)])


class ResultForm(ApiForm):
    winner = SelectField(
        "Winner",
        choices=[("", "Undecided"), ("A", "Team A"), ("B", "Team B")],
        default="",
    )
    score_a = IntegerField("Team A score", validators=[Optional(), NumberRange(min=0)])
    score_b = IntegerField("Team B score", validators=[Optional(), NumberRange(min=0)])


class ContestForm(ApiForm):
    name = StringField("Contest name", validators=[Optional(), Length(max=100)])
    current_round_name = StringField(
        "Current round", validators=[Optional(), Length(max=50)]
    )
