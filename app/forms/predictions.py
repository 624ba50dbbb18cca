from flask_wtf import FlaskForm
from wtforms import IntegerField
from wtforms.validators import InputRequired


class PredictionForm(FlaskForm):
    match_id = IntegerField("Match", validators=[InputRequired()])
    predicted_toss_winner_id = IntegerField("Toss Winner", validators=[InputRequired()])
    predicted_match_winner_id = IntegerField(
        "Match Winner", validators=[InputRequired()]
    )
