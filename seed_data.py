import json
import os

from app import create_app
from extensions import db
from models import User, Group, PresentationSlot, Project, Score, JudgingStatus

SAMPLE_PROJECTS = [
    {'devpost_id': 'solar-scheduler', 'name': 'Solar Scheduler', 'devpost_url': 'https://devpost.com/software/solar-scheduler', 'team_members': ['Ana', 'Bo']},
    {'devpost_id': 'budget-buddy', 'name': 'Budget Buddy', 'devpost_url': 'https://devpost.com/software/budget-buddy', 'team_members': ['Chen']},
    {'devpost_id': 'pet-pal', 'name': 'PetPal', 'devpost_url': 'https://devpost.com/software/pet-pal', 'team_members': ['Dee', 'Eli', 'Fay']},
    {'devpost_id': 'study-sync', 'name': 'StudySync', 'devpost_url': 'https://devpost.com/software/study-sync', 'team_members': ['Gus']},
    {'devpost_id': 'green-route', 'name': 'GreenRoute', 'devpost_url': 'https://devpost.com/software/green-route', 'team_members': ['Hal', 'Ivy']},
]

# An application instance provides the context
app = create_app()

with app.app_context():
    db.create_all()

    # --- 1. Clear old data ---
    print("Clearing old data...")
    # Reverse dependency order
    db.session.query(Score).delete()
    db.session.query(PresentationSlot).delete()
    db.session.query(Project).delete()
    db.session.query(User).delete()
    db.session.query(Group).delete()
    db.session.query(JudgingStatus).delete()
    db.session.commit()
    print("Done.")

    # --- 2. Create data ---
    print("Adding sample data...")

    try:
        director = User(code='000001', name='Dana Director', role='director')
        mentors = [User(code=f'10000{i}', name=f'Mentor {i}', role='mentor') for i in range(1, 3)]
        judges = [User(code=f'20000{i}', name=f'Judge {i}', role='judge') for i in range(1, 6)]
        db.session.add_all([director, *mentors, *judges])
        db.session.add(JudgingStatus(active=False))
        db.session.commit()

        # Projects are imported from this file when the director forms groups
        projects_file = app.config['PROJECTS_FILE']
        os.makedirs(os.path.dirname(projects_file), exist_ok=True)
        with open(projects_file, 'w', encoding='utf-8') as f:
            json.dump(SAMPLE_PROJECTS, f, indent=2)

        print(f"Sample data added. Projects written to {projects_file}")
    except Exception as e:
        db.session.rollback()
        print(f"Failed to add sample data: {e}")
