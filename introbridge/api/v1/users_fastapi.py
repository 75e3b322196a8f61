"""
FastAPI-Users configuration: user manager, auth backend, schemas, Resend hooks.
"""

import logging
import re
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import BaseUserManager, FastAPIUsers, IntegerIDMixin, InvalidPasswordException, exceptions, schemas
from fastapi_users.authentication import AuthenticationBackend, BearerTransport, JWTStrategy
from fastapi_users.db import SQLAlchemyUserDatabase
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...components.notifications.email_client import EmailService
from ...models.organization import Organization
from ...models.sponsor import Sponsor
from ...models.user import User
from ...platform.config import settings
from ...platform.database import get_async_db

logger = logging.getLogger("introbridge.auth")


# ---- Schemas (extend FastAPI-Users base) ----
class UserRead(schemas.BaseUser[int]):
    full_name: Optional[str] = None


class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None
    organization_name: Optional[str] = None
    job_title: Optional[str] = None


class UserUpdate(schemas.BaseUserUpdate):
    full_name: Optional[str] = None


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "organization"


async def _unique_slug(session: AsyncSession, name: str) -> str:
    base = _slugify(name)
    slug = base
    suffix = 2
    while (await session.execute(select(Organization.id).where(Organization.slug == slug))).first():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


# ---- User Manager ----
class UserManager(IntegerIDMixin, BaseUserManager[User, int]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY
    reset_password_token_lifetime_seconds = 3600
    verification_token_lifetime_seconds = 86400  # 24 hours

    async def validate_password(self, password: str, user) -> None:
        if len(password) < 8:
            raise InvalidPasswordException(reason="Password should be at least 8 characters")

    async def create(self, user_create, safe: bool = False, request: Optional[Request] = None) -> User:
        """Create the login and, with ``organization_name``, a new organization it sponsors for."""
        await self.validate_password(user_create.password, user_create)

        existing_user = await self.user_db.get_by_email(user_create.email)
        if existing_user is not None:
            raise exceptions.UserAlreadyExists()

        user_dict = (
            user_create.create_update_dict()
            if safe
            else user_create.create_update_dict_superuser()
        )
        password = user_dict.pop("password")
        user_dict["hashed_password"] = self.password_helper.hash(password)
        organization_name = (user_dict.pop("organization_name", None) or "").strip()
        job_title = user_dict.pop("job_title", None)

        session: AsyncSession = self.user_db.session
        org = None
        if organization_name:
            org = Organization(name=organization_name, slug=await _unique_slug(session, organization_name))
            session.add(org)
            await session.flush()

        created_user = await self.user_db.create(user_dict)

        if org is not None:
            session.add(
                Sponsor(
                    user_id=created_user.id,
                    organization_id=org.id,
                    job_title=job_title,
                    can_send_introductions=True,
                    can_create_roles=True,
                )
            )
            await session.commit()
            logger.info("Registered sponsor for new organization", extra={"organization_id": org.id})

        await self.on_after_register(created_user, request)
        return created_user

    async def on_after_register(self, user: User, request: Optional[Request] = None) -> None:
        logger.info("User %s registered", user.id)

    async def on_after_forgot_password(
        self, user: User, token: str, request: Optional[Request] = None
    ) -> None:
        key = (settings.RESEND_API_KEY or "").strip()
        if not key or key.lower() == "skip":
            logger.warning("RESEND_API_KEY not set or 'skip' - not sending password reset email to %s", user.email)
            return
        reset_link = f"{settings.FRONTEND_URL}/reset-password?token={token}"
        result = EmailService(api_key=key, from_email=settings.EMAIL_FROM).send_notification(
            to_email=user.email,
            title="Reset your password",
            body="Someone asked to reset the password for your account. The link below is valid for one hour.",
            action_link=reset_link,
        )
        if not result.get("success"):
            logger.error("Resend rejected password reset email for %s", user.email)

    async def on_after_request_verify(
        self, user: User, token: str, request: Optional[Request] = None
    ) -> None:
        key = (settings.RESEND_API_KEY or "").strip()
        if not key or key.lower() == "skip":
            logger.warning("RESEND_API_KEY not set - skipping verification email for %s", user.email)
            return
        EmailService(api_key=key, from_email=settings.EMAIL_FROM).send_notification(
            to_email=user.email,
            title="Verify your email",
            body=f"Hi {user.full_name or user.email}, confirm your email address to finish setting up your account.",
            action_link=f"{settings.FRONTEND_URL}/verify-email?token={token}",
        )


async def get_user_db(session: AsyncSession = Depends(get_async_db)):
    yield SQLAlchemyUserDatabase(session, User)


async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)


# ---- Auth Backend ----
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, int](get_user_manager, [auth_backend])

current_active_user = fastapi_users.current_user(active=True)
