from __future__ import annotations

import threading

from rooms.codes import CodeGenerator
from rooms.registry import JoinOutcome, SessionRegistry


def test_create_then_lookup_returns_owner(registry, clock):
    code = registry.create_session("owner-1")
    session = registry.lookup(code)
    assert session is not None
    assert session.owner == "owner-1"
    assert session.created_at == clock.now
    assert registry.members(code) == {"owner-1"}


def test_lookup_unknown_code_is_none(registry):
    assert registry.lookup("0000") is None


def test_codes_are_unique_while_live(registry):
    codes = [registry.create_session(f"c{i}") for i in range(500)]
    assert len(set(codes)) == len(codes)
    assert len(registry) == 500


def test_concurrent_creates_never_share_a_code():
    registry = SessionRegistry(CodeGenerator(digits=2))
    results = []

    def worker(n):
        results.append(registry.create_session(f"conn-{n}"))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(80)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(results)) == 80


def test_remove_is_idempotent(registry):
    code = registry.create_session("owner")
    first = registry.remove_session(code)
    assert first is not None and first.code == code
    assert registry.remove_session(code) is None
    assert registry.lookup(code) is None


def test_all_owned_by(registry):
    a = registry.create_session("owner")
    b = registry.create_session("owner")
    registry.create_session("someone-else")
    assert sorted(registry.all_owned_by("owner")) == sorted([a, b])
    assert registry.all_owned_by("nobody") == []


def test_admit_outcomes(registry):
    code = registry.create_session("owner")
    assert registry.admit("0000", "peer") is JoinOutcome.NOT_FOUND
    assert registry.admit(code, "peer") is JoinOutcome.JOINED
    assert registry.admit(code, "peer") is JoinOutcome.ALREADY_MEMBER
    assert registry.admit(code, "owner") is JoinOutcome.ALREADY_MEMBER
    assert registry.admit(code, "third") is JoinOutcome.FULL
    assert registry.confirm(code, "peer") is True
    assert registry.members(code) == {"owner", "peer"}


def test_admitted_joiner_is_not_a_member_until_confirmed(registry):
    code = registry.create_session("owner")
    registry.admit(code, "peer")
    assert registry.members(code) == {"owner"}
    assert not registry.is_member(code, "peer")
    # The reservation still holds the slot.
    assert registry.admit(code, "third") is JoinOutcome.FULL
    assert registry.confirm(code, "peer") is True
    assert registry.is_member(code, "peer")
    assert registry.confirm(code, "peer") is False


def test_confirm_fails_once_session_is_gone(registry):
    code = registry.create_session("owner")
    registry.admit(code, "peer")
    removal = registry.remove_session(code)
    assert removal.members == {"owner"}
    assert registry.confirm(code, "peer") is False


def test_discard_member_releases_reservation(registry):
    code = registry.create_session("owner")
    registry.admit(code, "peer")
    assert registry.discard_member("peer") == []
    assert registry.confirm(code, "peer") is False
    assert registry.admit(code, "other") is JoinOutcome.JOINED


def test_larger_capacity_admits_more_members(clock):
    registry = SessionRegistry(capacity=3, clock=clock)
    code = registry.create_session("owner")
    assert registry.admit(code, "a") is JoinOutcome.JOINED
    assert registry.admit(code, "b") is JoinOutcome.JOINED
    assert registry.admit(code, "c") is JoinOutcome.FULL


def test_removal_reports_remaining_members(registry):
    code = registry.create_session("owner")
    registry.admit(code, "peer")
    registry.confirm(code, "peer")
    removal = registry.remove_session(code)
    assert removal.members == {"owner", "peer"}
    assert removal.remaining == {"peer"}
    assert registry.members(code) == frozenset()


def test_discard_member_leaves_owned_rooms_alone(registry):
    mine = registry.create_session("a")
    theirs = registry.create_session("b")
    registry.admit(theirs, "a")
    registry.confirm(theirs, "a")
    assert registry.discard_member("a") == [(theirs, "b")]
    assert registry.members(theirs) == {"b"}
    assert registry.members(mine) == {"a"}


def test_purge_expired(registry, clock):
    old = registry.create_session("old")
    clock.advance(200)
    fresh = registry.create_session("fresh")
    clock.advance(101)

    removed = registry.purge_expired(300)
    assert [r.code for r in removed] == [old]
    assert registry.lookup(old) is None
    assert registry.lookup(fresh) is not None
    # Second sweep over the same clock finds nothing.
    assert registry.purge_expired(300) == []


def test_expired_code_can_be_reissued(fixed_registry, clock):
    code = fixed_registry.create_session("first")
    assert code == "4821"
    clock.advance(301)
    fixed_registry.purge_expired(300)
    assert fixed_registry.create_session("second") == "4821"
    assert fixed_registry.lookup("4821").owner == "second"
