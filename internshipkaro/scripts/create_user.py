"""
Create a user from the command line (seeding, support). Run from project root:
  python -m internshipkaro.scripts.create_user EMAIL PASSWORD FIRST_NAME LAST_NAME [LEVEL]
Example:
  python -m internshipkaro.scripts.create_user mentor@internshipkaro.in 'a-long-password' Asha Rao EXPERT
"""
import argparse
import logging
import sys

from pydantic import ValidationError as PydanticValidationError

from internshipkaro.core.config import get_settings
from internshipkaro.core.database import build_engine, build_session_factory
from internshipkaro.core.errors import ConflictError
from internshipkaro.core.security import PasswordHasher
from internshipkaro.models.user import ExperienceLevel
from internshipkaro.schemas.auth import RegisterRequest
from internshipkaro.services.users import create_user, get_user_by_email

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an InternshipKaro user.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument(
        "experience_level",
        nargs="?",
        default=ExperienceLevel.BEGINNER.value,
        choices=[level.value for level in ExperienceLevel],
    )
    args = parser.parse_args(argv)

    try:
        body = RegisterRequest.model_validate(
            {
                "email": args.email.strip(),
                "password": args.password,
                "firstName": args.first_name,
                "lastName": args.last_name,
                "experienceLevel": args.experience_level,
            }
        )
    except PydanticValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        if get_user_by_email(db, body.email) is not None:
            print(f"User '{body.email}' already exists.", file=sys.stderr)
            return 1
        hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
        user = create_user(
            db,
            email=body.email,
            password_hash=hasher.hash(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
            experience_level=body.experience_level,
        )
        db.commit()
        logger.info("Created user %s (%s)", body.email, user.id)
        return 0
    except ConflictError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
