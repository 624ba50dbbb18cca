from flask_wtf import FlaskForm
from wtforms import BooleanField, DateTimeField, IntegerField, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, Optional

from app.models import Match

MATCH_DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
]


class TeamForm(FlaskForm):
    name = StringField("Team Name", validators=[DataRequired(), Length(max=100)])
    logo_url = StringField("Logo URL", validators=[Optional(), Length(max=500)])
    is_custom = BooleanField("Custom Team", default=True)


class MatchForm(FlaskForm):
    tournament_name = StringField(
        "Tournament", validators=[DataRequired(), Length(max=200)]
    )
    team1_id = IntegerField("Team 1", validators=[InputRequired()])
    team2_id = IntegerField("Team 2", validators=[InputRequired()])
    location = StringField("Location", validators=[DataRequired(), Length(max=200)])
    match_date = DateTimeField(
        "Match Date", format=MATCH_DATE_FORMATS, validators=[InputRequired()]
    )


class MatchUpdateForm(FlaskForm):
    """Partial fixture update; only submitted fields are applied"""

    tournament_name = StringField(
        "Tournament", validators=[Optional(), Length(max=200)]
    )
    team1_id = IntegerField("Team 1", validators=[Optional()])
    team2_id = IntegerField("Team 2", validators=[Optional()])
    location = StringField("Location", validators=[Optional(), Length(max=200)])
    match_date = DateTimeField(
        "Match Date", format=MATCH_DATE_FORMATS, validators=[Optional()]
    )
    status = StringField(
        "Status", validators=[Optional(), AnyOf(Match.STATUSES)]
    )


class MatchResultForm(FlaskForm):
    toss_winner_id = IntegerField("Toss Winner", validators=[InputRequired()])
    match_winner_id = IntegerField("Match Winner", validators=[InputRequired()])
    team1_score = StringField("Team 1 Score", validators=[Optional(), Length(max=100)])
    team2_score = StringField("Team 2 Score", validators=[Optional(), Length(max=100)])
    result_summary = StringField(
        "Result Summary", validators=[Optional(), Length(max=500)]
    )


class MatchStatusForm(FlaskForm):
    status = StringField("Status", validators=[DataRequired(), AnyOf(["ongoing"])])


class SettingForm(FlaskForm):
    value = StringField("Value", validators=[DataRequired()])

