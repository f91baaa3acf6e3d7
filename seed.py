import argparse
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from clinic.models.all_models import Base, User, Profile, UserRole
from clinic.utils.auth import hash_password
from clinic.config import settings

logger = logging.getLogger("seed")

def create_admin_user(email, password, full_name, phone=None, database_url=None):
    engine = create_engine(database_url or settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        email = email.lower()
        existing_user = session.query(User).filter_by(email=email).first()
        if existing_user:
            logger.error("User with email %s already exists", email)
            return None

        new_user = User(email=email, password=hash_password(password), is_active=True)
        new_user.profile = Profile(
            email=email,
            full_name=full_name,
            phone=phone,
            role=UserRole.ADMIN,
            is_active=True
        )

        session.add(new_user)
        session.commit()

        logger.info("Admin user created successfully: %s", email)
        return new_user.profile.id

    except Exception:
        session.rollback()
        logger.exception("Error creating admin user %s", email)
        raise
    finally:
        session.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Admin password")
    parser.add_argument("--full-name", required=True, help="Full name")
    parser.add_argument("--phone", default=None, help="Phone number")

    args = parser.parse_args()

    create_admin_user(
        email=args.email,
        password=args.password,
        full_name=args.full_name,
        phone=args.phone
    )
