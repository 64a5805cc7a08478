# seed_athletes.py
import random
from datetime import date, timedelta

from dotenv import load_dotenv

load_dotenv()

from swimtrack import create_app
from swimtrack.extensions import db
from swimtrack.helpers.swim import INDIVIDUAL_MEDLEY
from swimtrack.models import SwimRecord, User

app = create_app()


def _im_time(base_seconds: float) -> str:
    minutes, seconds = divmod(base_seconds, 60)
    return f"{int(minutes):02d}:{seconds:05.2f}"


def main(num_athletes=20, months=6):
    with app.app_context():
        db.create_all()
        existing = User.query.filter_by(role="student").count()
        print(f"Existing athletes: {existing}")

        today = date.today()
        for i in range(num_athletes):
            athlete = User(
                username=f"Test Athlete {existing + i + 1}",
                role="student",
                gender=random.choice(("male", "female")),
            )
            athlete.set_password("changeme")
            db.session.add(athlete)
            db.session.flush()

            # One 60m IM swim per month, drifting faster over time
            base = random.uniform(50.0, 75.0)
            for m in range(months):
                base -= random.uniform(-0.5, 1.5)
                db.session.add(
                    SwimRecord(
                        student_id=athlete.id,
                        style=INDIVIDUAL_MEDLEY,
                        distance=60,
                        time=_im_time(base),
                        date=today - timedelta(days=30 * (months - m)),
                        pool_length=15,
                    )
                )

        db.session.commit()
        total = User.query.filter_by(role="student").count()
        print(f"Now have {total} athletes in the DB.")

if __name__ == "__main__":
    main()
