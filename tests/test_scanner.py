"""End-to-end session tests against mocked targets."""

import time

import httpx
import pytest
import respx
from httpx import Response

from conftest import LOGIN_PAGE, LOGIN_URL, login_handler
from redfox.errors import ExhaustedInputError, ScopeError
from redfox.modules.credentials import AttackMode
from redfox.modules.results import OutcomeKind, SessionState
from redfox.modules.scanner import ScanRequest, Scanner, run_benchmark, run_scan
from redfox.modules.scheduler import SuccessPolicy
from redfox.modules.target import Scope, Target


def request_for(**overrides) -> ScanRequest:
    values = {
        "mode": AttackMode.DICTIONARY,
        "users": "admin,root",
        "passwords": "123456,admin",
        "threads": 4,
        "rate_limit": 0.0,
    }
    values.update(overrides)
    return ScanRequest(**values)


class TestScanScenarios:
    """Whole sessions through scheduler, executor and aggregator."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_dictionary_finds_single_valid_pair(self, target: Target):
        """admin/root x 123456/admin against a target that accepts only admin:admin."""
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        route = respx.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "admin")}))

        session = await run_scan(request_for(), target)

        assert session.state is SessionState.COMPLETED
        assert route.call_count == 4
        tallies = session.tallies
        assert tallies.attempted == 4
        assert tallies.succeeded == 1
        assert tallies.by_kind["invalid_credentials"] == 3
        assert [o.pair.key for o in session.successes] == [("admin", "admin")]
        assert session.resume_offset == session.total_candidates == 4

    @respx.mock
    @pytest.mark.asyncio
    async def test_stop_on_first_success(self, target: Target):
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        respx.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "123456")}))
        request = request_for(
            users="admin,root,guest",
            passwords="123456,admin,guest,root",
            threads=1,
            success_policy=SuccessPolicy.FIRST,
        )

        session = await run_scan(request, target)

        assert session.state is SessionState.STOPPED
        assert session.stop_reason == "success"
        assert len(session.outcomes) == 1
        assert session.resume_offset == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_is_enforced(self, target: Target):
        """21 candidates at 20/s take at least one second."""
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        respx.post(LOGIN_URL).mock(side_effect=login_handler(set()))
        request = request_for(
            users="admin",
            passwords=",".join(f"pw{i}" for i in range(21)),
            threads=8,
            rate_limit=20.0,
        )
        start = time.monotonic()

        session = await run_scan(request, target)

        assert time.monotonic() - start >= 0.9
        assert session.tallies.attempted == 21

    @respx.mock
    @pytest.mark.asyncio
    async def test_network_unreachable_mid_run(self, target: Target):
        """Results so far are kept and the session aborts instead of completing."""
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        handler = login_handler(set())
        calls = {"n": 0}

        def flaky(request):
            calls["n"] += 1
            if calls["n"] > 3:
                raise httpx.ConnectError("[Errno 101] Network is unreachable")
            return handler(request)

        respx.post(LOGIN_URL).mock(side_effect=flaky)
        request = request_for(
            users="admin",
            passwords=",".join(f"pw{i}" for i in range(20)),
            threads=1,
            max_retries=0,
            max_consecutive_errors=3,
        )

        session = await run_scan(request, target)

        assert session.state is SessionState.ABORTED
        assert session.failed_fatally
        assert "unreachable" in session.error
        assert session.tallies.by_kind["invalid_credentials"] == 3
        assert session.tallies.by_kind["network_error"] == 3
        assert session.resume_offset == 6

    @respx.mock
    @pytest.mark.asyncio
    async def test_dropped_connections_abort(self, target: Target):
        """A host that stops answering SYNs ends the session as unreachable."""
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        respx.post(LOGIN_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
        request = request_for(
            users="admin",
            passwords=",".join(f"pw{i}" for i in range(40)),
            max_retries=0,
        )

        session = await run_scan(request, target)

        assert session.state is SessionState.ABORTED
        assert "unreachable" in session.error
        assert session.tallies.by_kind["network_error"] >= 10
        assert session.tallies.attempted < 40

    @respx.mock
    @pytest.mark.asyncio
    async def test_preflight_failure_aborts(self, target: Target):
        respx.get(LOGIN_URL).mock(side_effect=httpx.ConnectError("[Errno 111] Connection refused"))

        session = await run_scan(request_for(), target)

        assert session.state is SessionState.ABORTED
        assert session.outcomes == []
        assert "Connection failed" in session.error

    @respx.mock
    @pytest.mark.asyncio
    async def test_resume_from_offset(self, target: Target):
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        route = respx.post(LOGIN_URL).mock(side_effect=login_handler({("root", "admin")}))

        session = await run_scan(request_for(resume_offset=2, threads=1), target)

        assert route.call_count == 2
        assert [o.pair.username for o in session.outcomes] == ["root", "root"]
        assert session.successes[0].pair.key == ("root", "admin")

    @respx.mock
    @pytest.mark.asyncio
    async def test_throttled_target_is_retried(self, target: Target):
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        handler = login_handler({("admin", "admin")})
        calls = {"n": 0}

        def throttle_first(request):
            calls["n"] += 1
            if calls["n"] == 1:
                return Response(429, headers={"Retry-After": "0"})
            return handler(request)

        respx.post(LOGIN_URL).mock(side_effect=throttle_first)

        session = await run_scan(request_for(users="admin", passwords="admin", threads=1), target)

        (outcome,) = session.outcomes
        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.retries == 1

    @pytest.mark.asyncio
    async def test_out_of_scope_target_rejected(self, target: Target):
        scanner = Scanner(request_for(), scope=Scope(["allowed.test"]))

        with pytest.raises(ScopeError):
            await scanner.run(target)
        assert scanner.session is None

    @pytest.mark.asyncio
    async def test_missing_wordlist_rejected(self, target: Target, temp_dir):
        request = request_for(passwords=str(temp_dir / "missing.txt"))

        with pytest.raises(ExhaustedInputError):
            await run_scan(request, target)


class TestBenchmark:
    @respx.mock
    @pytest.mark.asyncio
    async def test_runs_every_iteration(self, target: Target):
        respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        route = respx.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "admin")}))

        result = await run_benchmark(
            request_for(success_policy=SuccessPolicy.FIRST), target, iterations=3
        )

        assert len(result.iterations) == 3
        assert route.call_count == 12
        assert result.total_attempts == 12
        assert all(item.succeeded == 1 for item in result.iterations)
        assert result.mean_rate > 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_stops_after_aborted_iteration(self, target: Target):
        respx.get(LOGIN_URL).mock(side_effect=httpx.ConnectError("[Errno 111] Connection refused"))

        result = await run_benchmark(request_for(), target, iterations=3)

        assert len(result.iterations) == 1
        assert result.total_attempts == 0


class TestScanRequest:
    def test_dict_round_trip(self):
        request = request_for(success_policy=SuccessPolicy.PER_USER, headers={"X-Test": "1"})

        assert ScanRequest.from_dict(request.to_dict()) == request

    def test_from_config_fills_unset_options(self):
        from redfox.config import RedFoxConfig

        config = RedFoxConfig()
        config.scanning.threads = 7
        config.wordlists.default_users = "@default-users"

        request = ScanRequest.from_config(config, threads=None, rate_limit=5.0)

        assert request.threads == 7
        assert request.rate_limit == 5.0
        assert request.users == "@default-users"
        assert request.search_paths == config.wordlists.search_paths
