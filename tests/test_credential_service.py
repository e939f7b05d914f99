import asyncio
import tempfile
import unittest
from datetime import timedelta
from uuid import uuid4

from sqlalchemy import func, select

from auth.exceptions import (
    InvalidCredentials,
    InvalidHashFormat,
    InvalidToken,
    StoreError,
    TokenNotFound,
    UserAlreadyExists,
)
from auth.models import AuthResult, RefreshToken, User, utcnow
from auth.security import TokenCodec, hash_token
from auth.services.credential_service import CredentialService
from auth.stores.memory_store import MemoryRefreshTokenStore, MemoryUserStore
from auth.stores.sql_store import SQLRefreshTokenStore, SQLUserStore
from db.engine import create_db_engine, create_session_factory, init_db
from db.models import RefreshTokenRow
from tests.helpers import TEST_SECRET, fast_config, race_in_threads


class FailingTokenStore(MemoryRefreshTokenStore):
    async def rotate(self, token_hash, now, next_token):
        raise StoreError("database unavailable")


class TestCredentialService(unittest.IsolatedAsyncioTestCase):
    def make_service(self, token_store=None) -> CredentialService:
        self.users = MemoryUserStore()
        self.tokens = token_store if token_store is not None else MemoryRefreshTokenStore()
        return CredentialService(self.users, self.tokens, fast_config())

    async def asyncSetUp(self):
        self.service = self.make_service()
        self.codec = TokenCodec(TEST_SECRET)

    async def test_signup_issues_tokens(self):
        result = await self.service.signup("alice", "correct-horse")

        self.assertTrue(result.user_id)
        self.assertTrue(result.access_token)
        self.assertTrue(result.refresh_token)
        self.assertEqual(len(result.kdf_salt), 16)
        self.assertEqual(self.codec.verify(result.access_token), result.user_id)

        user = await self.users.get_by_login("alice")
        self.assertEqual(user.id, result.user_id)
        self.assertEqual(user.kdf_salt, result.kdf_salt)
        self.assertNotIn(b"correct-horse", user.password_hash)

        # Only the digest of the refresh secret is persisted
        stored = await self.tokens.get_by_hash(hash_token(result.refresh_token))
        self.assertEqual(stored.user_id, result.user_id)
        self.assertNotEqual(stored.token_hash, result.refresh_token.encode())

    async def test_signup_duplicate_login(self):
        await self.service.signup("alice", "correct-horse")
        with self.assertRaises(UserAlreadyExists) as ctx:
            await self.service.signup("alice", "another")
        self.assertNotIsInstance(ctx.exception, InvalidCredentials)
        self.assertEqual(ctx.exception.status_code, 409)

    async def test_signin_scenario(self):
        signup = await self.service.signup("alice", "correct-horse")

        signin = await self.service.signin("alice", "correct-horse")
        self.assertEqual(signin.user_id, signup.user_id)
        self.assertEqual(signin.kdf_salt, signup.kdf_salt)
        self.assertNotEqual(signin.access_token, signup.access_token)
        self.assertNotEqual(signin.refresh_token, signup.refresh_token)

        with self.assertRaises(InvalidCredentials):
            await self.service.signin("alice", "wrong")

    async def test_signin_failures_are_indistinguishable(self):
        await self.service.signup("alice", "correct-horse")

        with self.assertRaises(InvalidCredentials) as unknown:
            await self.service.signin("mallory", "correct-horse")
        with self.assertRaises(InvalidCredentials) as wrong:
            await self.service.signin("alice", "wrong")

        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(unknown.exception.status_code, wrong.exception.status_code)

    async def test_signin_with_corrupt_hash(self):
        await self.users.create(
            User(id=str(uuid4()), login="broken", password_hash=b"short", kdf_salt=b"s" * 16)
        )
        with self.assertRaises(InvalidHashFormat):
            await self.service.signin("broken", "whatever")

    async def test_refresh_scenario(self):
        signup = await self.service.signup("alice", "correct-horse")
        old_secret = signup.refresh_token

        refreshed = await self.service.refresh(old_secret)
        self.assertNotEqual(refreshed.refresh_token, old_secret)
        self.assertEqual(refreshed.user_id, signup.user_id)
        self.assertEqual(refreshed.kdf_salt, signup.kdf_salt)
        self.assertEqual(self.codec.verify(refreshed.access_token), signup.user_id)

        with self.assertRaises(InvalidCredentials):
            await self.service.refresh(old_secret)

        again = await self.service.refresh(refreshed.refresh_token)
        self.assertNotEqual(again.refresh_token, refreshed.refresh_token)

    async def test_refresh_is_single_use(self):
        signup = await self.service.signup("alice", "correct-horse")
        await self.service.refresh(signup.refresh_token)
        for _ in range(3):
            with self.assertRaises(InvalidCredentials):
                await self.service.refresh(signup.refresh_token)

    async def test_refresh_unknown_token(self):
        with self.assertRaises(InvalidCredentials):
            await self.service.refresh("never-issued")

    async def test_expired_refresh_token_is_consumed(self):
        signup = await self.service.signup("alice", "correct-horse")
        await self.tokens.create(
            RefreshToken(
                id=str(uuid4()),
                user_id=signup.user_id,
                token_hash=hash_token("stale-secret"),
                expires_at=utcnow() - timedelta(minutes=1),
            )
        )

        with self.assertRaises(InvalidCredentials):
            await self.service.refresh("stale-secret")
        with self.assertRaises(TokenNotFound):
            await self.tokens.get_by_hash(hash_token("stale-secret"))
        with self.assertRaises(InvalidCredentials):
            await self.service.refresh("stale-secret")

    async def test_concurrent_refresh_has_one_winner(self):
        signup = await self.service.signup("alice", "correct-horse")
        self.assertEqual(len(self.tokens), 1)

        results = await asyncio.gather(
            *(self.service.refresh(signup.refresh_token) for _ in range(5)),
            return_exceptions=True,
        )

        winners = [r for r in results if isinstance(r, AuthResult)]
        losers = [r for r in results if not isinstance(r, AuthResult)]
        self.assertEqual(len(winners), 1)
        self.assertEqual(len(losers), 4)
        self.assertTrue(all(isinstance(r, InvalidCredentials) for r in losers))

        self.assertEqual(len(self.tokens), 1)
        stored = await self.tokens.get_by_hash(hash_token(winners[0].refresh_token))
        self.assertEqual(stored.user_id, signup.user_id)

    async def test_store_errors_propagate(self):
        service = self.make_service(token_store=FailingTokenStore())
        signup = await service.signup("alice", "correct-horse")
        with self.assertRaises(StoreError) as ctx:
            await service.refresh(signup.refresh_token)
        self.assertNotIsInstance(ctx.exception, InvalidCredentials)

    async def test_authenticate(self):
        signup = await self.service.signup("alice", "correct-horse")
        self.assertEqual(self.service.authenticate(signup.access_token), signup.user_id)
        with self.assertRaises(InvalidToken):
            self.service.authenticate(signup.refresh_token)


class TestCredentialServiceWithSQLStores(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        engine = create_db_engine("sqlite://")
        init_db(engine)
        self.addCleanup(engine.dispose)
        session_factory = create_session_factory(engine)
        self.tokens = SQLRefreshTokenStore(session_factory)
        self.service = CredentialService(SQLUserStore(session_factory), self.tokens, fast_config())

    async def test_full_lifecycle(self):
        signup = await self.service.signup("alice", "correct-horse")
        signin = await self.service.signin("alice", "correct-horse")
        self.assertEqual(signin.user_id, signup.user_id)
        self.assertEqual(signin.kdf_salt, signup.kdf_salt)

        refreshed = await self.service.refresh(signin.refresh_token)
        self.assertEqual(refreshed.user_id, signup.user_id)
        with self.assertRaises(InvalidCredentials):
            await self.service.refresh(signin.refresh_token)

        # The signup token belongs to another lineage and is still live
        await self.service.refresh(signup.refresh_token)


class TestConcurrentRefreshWithSQLStores(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        engine = create_db_engine(f"sqlite:///{tmp.name}/pkeeper.db")
        init_db(engine)
        self.addCleanup(engine.dispose)
        self.session_factory = create_session_factory(engine)
        self.service = CredentialService(
            SQLUserStore(self.session_factory),
            SQLRefreshTokenStore(self.session_factory),
            fast_config(),
        )

    def _refresh_token_rows(self) -> int:
        with self.session_factory() as db:
            return db.scalar(select(func.count()).select_from(RefreshTokenRow))

    def test_one_refresh_wins_across_threads(self):
        signup = asyncio.run(self.service.signup("alice", "correct-horse"))

        results = race_in_threads(8, lambda _: self.service.refresh(signup.refresh_token))

        winners = [r for r in results if isinstance(r, AuthResult)]
        self.assertEqual(len(winners), 1)
        self.assertTrue(
            all(isinstance(r, InvalidCredentials) for r in results if r not in winners),
            results,
        )
        self.assertEqual(self._refresh_token_rows(), 1)
        follow_up = asyncio.run(self.service.refresh(winners[0].refresh_token))
        self.assertEqual(follow_up.user_id, signup.user_id)


if __name__ == "__main__":
    unittest.main()
