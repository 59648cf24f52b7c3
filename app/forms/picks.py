from wtforms import IntegerField, RadioField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, Regexp

from app.forms import ApiForm

NAME_VALIDATORS = [
    DataRequired(message="Enter first and last name."),
    Length(max=50),
    Regexp(r"^[^<>]*$", message="Name contains invalid characters"),
]


class RegistrationForm(ApiForm):
    first_name = StringField("First name", validators=NAME_VALIDATORS)
    last_name = StringField("Last name", validators=NAME_VALIDATORS)


class MakePickForm(ApiForm):
    matchup_id = IntegerField("Game", validators=[DataRequired()])
    picked = RadioField(
        "Pick", choices=[("A", "Side A"), ("B", "Side B")], validators=[DataRequired()]
    )


class TiebreakGuessForm(ApiForm):
    tiebreak_guess = IntegerField(
        "Total points guess",
        validators=[
            Optional(),
            NumberRange(min=0, max=200, message="Guess must be between 0 and 200"),
        ],
    )
