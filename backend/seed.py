"""
Demo teacher accounts with completed profiles, and sample students for a
signed-in teacher.
Run directly to seed the configured storage: python seed.py
"""
from datetime import date

from faker import Faker

from models.student import BloodGroup
from models.teacher import TeacherProfile
from utils.helpers import utcnow

DEMO_PASSWORD = 'password123'
DEMO_ACADEMIC_YEAR = '2024-2025'

DEMO_TEACHERS = [
    {
        'name': 'Priya Sharma',
        'email': 'priya.sharma@school.com',
        'subject': 'Mathematics',
        'class_standard': '7',
        'division': 'A',
        'phone_number': '9876543210',
    },
    {
        'name': 'Rajesh Kumar',
        'email': 'rajesh.kumar@school.com',
        'subject': 'Science',
        'class_standard': '8',
        'division': 'B',
        'phone_number': '9876543211',
    },
    {
        'name': 'Anjali Desai',
        'email': 'anjali.desai@school.com',
        'subject': 'English',
        'class_standard': '10',
        'division': 'A',
        'phone_number': '9876543212',
    },
    {
        'name': 'Vikram Patel',
        'email': 'vikram.patel@school.com',
        'subject': 'History',
        'class_standard': '12',
        'phone_number': '9876543213',
    },
]


async def seed_demo_accounts(authenticator, store, school_name='Demo School', clock=utcnow):
    """Create the demo accounts that do not exist yet; returns their identities"""
    created = []
    for teacher in DEMO_TEACHERS:
        if await store.get_account(teacher['email']) is not None:
            continue

        identity = await authenticator.create_account(teacher['email'], DEMO_PASSWORD)
        now = clock()
        await store.save_profile(identity, TeacherProfile(
            school_name=school_name,
            academic_year=DEMO_ACADEMIC_YEAR,
            created_at=now,
            updated_at=now,
            **teacher
        ))
        created.append(identity)
    return created


SAMPLE_STUDENT_COUNT = 10
SAMPLE_MOTHER_TONGUES = ['English', 'Hindi', 'Marathi', 'Gujarati', 'Tamil']
SAMPLE_RELIGIONS = ['Hindu', 'Muslim', 'Christian', 'Sikh', 'Buddhist']
SAMPLE_CASTES = ['General', 'OBC', 'SC', 'ST']


def sample_student(fake, class_standard=None, division=None):
    """One realistic add-student payload (camelCase keys)"""
    birth_date = fake.date_between(start_date=date(2010, 1, 1), end_date=date(2012, 12, 31))
    return {
        'rollNo': fake.numerify('###'),
        'registerName': fake.name(),
        'fullName': fake.name(),
        'classStandard': class_standard or str(fake.random_int(1, 10)),
        'division': division or fake.random_element(['A', 'B', 'C']),
        'saralId': 'SR' + fake.numerify('#########'),
        'aparId': 'AP' + fake.numerify('#########'),
        'penNo': 'PEN' + fake.numerify('#########'),
        'aadhaarNo': fake.numerify('############'),
        'weightKg': str(fake.random_int(30, 60)),
        'heightCm': str(fake.random_int(130, 160)),
        'gender': fake.random_element(['male', 'female']),
        'birthDate': birth_date.isoformat(),
        'bloodGroup': fake.random_element([g.value for g in BloodGroup]),
        'fatherName': fake.name_male(),
        'motherName': fake.name_female(),
        'fatherMobile': fake.numerify('##########'),
        'motherMobile': fake.numerify('##########'),
        'motherTongue': fake.random_element(SAMPLE_MOTHER_TONGUES),
        'religion': fake.random_element(SAMPLE_RELIGIONS),
        'caste': fake.random_element(SAMPLE_CASTES),
        'casteCategory': fake.random_element(SAMPLE_CASTES),
        'address': fake.address().replace('\n', ', '),
        'bankAccountNo': fake.numerify('############'),
    }


async def seed_sample_students(controller, count=SAMPLE_STUDENT_COUNT, fake=None):
    """
    Add count generated students for the controller's session.

    Each one goes through controller.add and is checked and stored like a
    typed-in student. In class-scoped sessions the students are placed in
    the session's class.
    """
    fake = fake or Faker('en_IN')
    scope = controller.scope
    class_standard = scope.class_standard if scope else None
    division = scope.division if scope else None

    added = []
    for _ in range(count):
        added.append(await controller.add(sample_student(fake, class_standard, division)))
    return added


if __name__ == '__main__':
    from app import create_app

    app = create_app()
    services = app.extensions['classroom']
    created = services.runner.run(
        seed_demo_accounts(services.authenticator, services.session_store)
    )
    services.close()

    print(f"[OK] Seeded {len(created)} demo teacher(s) (password: {DEMO_PASSWORD})")
    for identity in created:
        print(f"   - {identity}")
