from app import create_app, db
from app.models import Match, PointsLedgerEntry, Prediction, SiteSetting, Team, User

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {
        "db": db,
        "User": User,
        "Team": Team,
        "Match": Match,
        "Prediction": Prediction,
        "PointsLedgerEntry": PointsLedgerEntry,
        "SiteSetting": SiteSetting,
    }


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
