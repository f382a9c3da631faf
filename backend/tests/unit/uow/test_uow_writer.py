"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from chirpy.models import RefreshToken, User
from chirpy.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()  # build = no persist
            uow.users.add(u)

        after = db.session.query(User).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()
            uow.users.add(u)
            raise RuntimeError("boom")

        after = db.session.query(User).count()
        assert after == initial

    def test_repositories_share_the_transaction(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN a user and one of its refresh tokens are added through two repositories
        THEN both rows are committed together.
        """
        now = datetime.now(UTC)
        with SQLAlchemyUnitOfWork() as uow:
            user = uow.users.add(UserFactory.build())
            uow.refresh_tokens.add(
                RefreshToken(
                    value="a" * 64,
                    subject_id=user.id,
                    issued_at=now,
                    expires_at=now + timedelta(days=60),
                )
            )

        assert db.session.query(RefreshToken).count() == 1
        assert db.session.get(RefreshToken, "a" * 64).user.email == user.email
