from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, create_engine, event, or_, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.article import Article
from models.base_model import Base
from models.blacklisted_token import BlacklistedToken
from models.permission import Permission
from models.user import User
from utils.exceptions import StorageUnavailable


class DBStorage:
    """
    Repository over a SQLAlchemy scoped session.

    Connection-level failures surface as StorageUnavailable. IntegrityError
    is re-raised untouched (after rollback) so callers can tell a unique
    violation apart from an outage.
    """

    __engine = None
    __session = None

    def reload(self, database_url: str, echo: bool = False):
        """Create the engine and tables, then start a fresh scoped session"""
        if self.__session is not None:
            self.__session.remove()
        if self.__engine is not None:
            self.__engine.dispose()

        kwargs = {"echo": echo}
        if database_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every checkout sees an empty DB
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self.__engine = create_engine(database_url, **kwargs)

        if self.__engine.url.get_backend_name() == "sqlite":
            # Enable SQLite foreign keys (needed for ON DELETE RESTRICT)
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        with self._guard():
            Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    @contextmanager
    def _guard(self):
        try:
            yield
        except IntegrityError:
            raise
        except DBAPIError as exc:
            if self.__session is not None:
                self.__session.rollback()
            raise StorageUnavailable(str(getattr(exc, "orig", exc))) from exc

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            with self._guard():
                self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def ping(self):
        """Round-trip to the database; raises StorageUnavailable if it is down"""
        with self._guard():
            self.__session.execute(text("SELECT 1"))

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session

    # users

    def find_user_by_email(self, email: str, include_deleted: bool = False) -> Optional[User]:
        query = self.__session.query(User).options(joinedload(User.permission)).filter(User.email == email)
        if not include_deleted:
            query = query.filter(User.deleted_at.is_(None))
        with self._guard():
            return query.order_by(User.deleted_at.is_(None).desc()).first()

    def find_user_by_id(self, user_id: str) -> Optional[User]:
        """Active user by id, with its permission row loaded."""
        if not user_id:
            return None
        with self._guard():
            return (
                self.__session.query(User)
                .options(joinedload(User.permission))
                .filter(User.id == user_id, User.deleted_at.is_(None))
                .first()
            )

    def save_user(self, user: User) -> User:
        self.new(user)
        self.save()
        return user

    def list_users(self) -> List[User]:
        with self._guard():
            return (
                self.__session.query(User)
                .options(joinedload(User.permission))
                .filter(User.deleted_at.is_(None))
                .order_by(User.created_at.asc(), User.id.asc())
                .all()
            )

    # permissions

    def find_permission_by_code(self, code) -> Optional[Permission]:
        with self._guard():
            return self.__session.query(Permission).filter(Permission.code == int(code)).first()

    def seed_permissions(self, catalog) -> int:
        """Insert catalog entries missing from the permissions table."""
        with self._guard():
            existing = {p.code for p in self.__session.query(Permission).all()}
        created = 0
        for meta in catalog:
            if int(meta.code) in existing:
                continue
            self.new(Permission(code=int(meta.code), name=meta.name, description=meta.description))
            created += 1
        if created:
            self.save()
        return created

    # articles

    def find_article(self, article_id: str) -> Optional[Article]:
        if not article_id:
            return None
        with self._guard():
            return (
                self.__session.query(Article)
                .options(joinedload(Article.author))
                .filter(Article.id == article_id, Article.deleted_at.is_(None))
                .first()
            )

    def find_article_page(
        self,
        after_created_at: Optional[datetime],
        after_id: Optional[str],
        limit: int,
    ) -> List[Article]:
        """Active articles strictly after (created_at, id), newest first."""
        query = (
            self.__session.query(Article)
            .options(joinedload(Article.author))
            .filter(Article.deleted_at.is_(None))
        )
        if after_created_at is not None and after_id is not None:
            query = query.filter(
                or_(
                    Article.created_at < after_created_at,
                    and_(Article.created_at == after_created_at, Article.id < after_id),
                )
            )
        with self._guard():
            return (
                query.order_by(Article.created_at.desc(), Article.id.desc())
                .limit(limit)
                .all()
            )

    # token blacklist

    def is_token_revoked(self, token: str) -> bool:
        with self._guard():
            row = (
                self.__session.query(BlacklistedToken.id)
                .filter(BlacklistedToken.token == token)
                .first()
            )
        return row is not None

    def record_revoked_token(self, token: str, expires_at: Optional[datetime] = None) -> bool:
        """
        Insert a blacklist row. Returns False when the token was already there;
        the unique constraint settles concurrent inserts.
        """
        if self.is_token_revoked(token):
            return False
        self.new(BlacklistedToken(token=token, expires_at=expires_at))
        try:
            self.save()
        except IntegrityError:
            return False
        return True

    def delete_revoked_tokens_before(self, moment: datetime) -> int:
        with self._guard():
            count = (
                self.__session.query(BlacklistedToken)
                .filter(
                    BlacklistedToken.expires_at.isnot(None),
                    BlacklistedToken.expires_at < moment,
                )
                .delete(synchronize_session=False)
            )
        self.save()
        return count
