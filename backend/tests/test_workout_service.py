import json
from datetime import timedelta

import pytest

from liftlog.cache import keys
from liftlog.cache.store import CacheStore
from liftlog.errors import CacheError, Conflict, Forbidden, InvalidState, NotFound, StoreError
from liftlog.models import WorkoutSession
from liftlog.schemas.exercise_set import SetInput
from liftlog.services.workout_service import WorkoutService

USER = 1
OTHER = 2


def sets(*specs):
    return [SetInput(**s) for s in specs]


class BrokenCache(CacheStore):
    """Every call fails, like an unreachable redis."""

    def get(self, key): raise CacheError("down")
    def set(self, key, value, ttl): raise CacheError("down")
    def delete(self, *keys): raise CacheError("down")
    def delete_pattern(self, pattern): raise CacheError("down")
    def exists(self, key): raise CacheError("down")
    def ping(self): raise CacheError("down")


def test_leg_day_scenario(workouts):
    w = workouts.start_workout(USER, "Leg Day")
    workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))

    active = workouts.get_active_workout(USER)
    assert active.name == "Leg Day"
    assert len(active.exercises) == 1
    ex = active.exercises[0]
    assert ex.name == "Squat"
    assert len(ex.sets) == 1
    assert ex.sets[0].set_number == 1
    assert ex.sets[0].reps == 5
    assert ex.sets[0].weight == 100


def test_start_caches_session_for_24h(workouts, cache):
    w = workouts.start_workout(USER, "Push")
    key = keys.active_workout_key(USER)
    assert cache.exists(key)
    assert cache.ttl(key) == pytest.approx(timedelta(hours=24).total_seconds(), abs=5)
    assert json.loads(cache.get(key))["id"] == w.id


def test_active_workout_miss_populates_cache(workouts, cache):
    w = workouts.start_workout(USER, "Pull")
    cache.delete(keys.active_workout_key(USER))

    assert workouts.get_active_workout(USER).id == w.id
    assert cache.exists(keys.active_workout_key(USER))


def test_active_workout_served_from_cache(workouts, cache, db):
    w = workouts.start_workout(USER, "Pull")
    # change the row behind the cache's back; the hit must not see it
    row = db.get(WorkoutSession, w.id)
    row.name = "Renamed"
    db.commit()
    assert workouts.get_active_workout(USER).name == "Pull"


def test_no_active_workout_is_not_cached(workouts, cache):
    assert workouts.get_active_workout(USER) is None
    assert not cache.exists(keys.active_workout_key(USER))

    w = workouts.start_workout(USER, "Later")
    assert workouts.get_active_workout(USER).id == w.id


def test_undecodable_cache_entry_is_a_miss(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    cache.set(keys.active_workout_key(USER), b"not json", timedelta(minutes=5))
    assert workouts.get_active_workout(USER).id == w.id


def test_most_recent_active_wins(workouts, cache):
    workouts.start_workout(USER, "First")
    second = workouts.start_workout(USER, "Second")
    cache.delete(keys.active_workout_key(USER))
    assert workouts.get_active_workout(USER).id == second.id


def test_get_workout_not_found(workouts):
    with pytest.raises(NotFound):
        workouts.get_workout(999)


def test_complete_invalidates_active_and_prs(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    cache.set(keys.user_prs_key(USER), b"[]", keys.TTL_USER_PRS)

    done = workouts.complete_workout(USER, w.id)
    assert done.status == "completed"
    assert done.completed_at is not None
    assert not cache.exists(keys.active_workout_key(USER))
    assert not cache.exists(keys.user_prs_key(USER))
    assert workouts.get_active_workout(USER) is None


def test_complete_twice_conflicts_and_leaves_cache(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    workouts.complete_workout(USER, w.id)
    current = workouts.start_workout(USER, "Arms")
    before = cache.get(keys.active_workout_key(USER))

    with pytest.raises(Conflict):
        workouts.complete_workout(USER, w.id)
    assert cache.get(keys.active_workout_key(USER)) == before
    assert workouts.get_active_workout(USER).id == current.id


def test_complete_unknown_or_foreign_workout_conflicts(workouts):
    with pytest.raises(Conflict):
        workouts.complete_workout(USER, 12345)
    w = workouts.start_workout(OTHER, "Not yours")
    with pytest.raises(Conflict):
        workouts.complete_workout(USER, w.id)
    assert workouts.get_workout(w.id).status == "active"


def test_delete_active_workout_invalidates(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    workouts.delete_workout(USER, w.id)
    assert not cache.exists(keys.active_workout_key(USER))
    with pytest.raises(NotFound):
        workouts.get_workout(w.id)


def test_delete_completed_workout_keeps_active_cache(workouts, cache):
    old = workouts.start_workout(USER, "Old")
    workouts.complete_workout(USER, old.id)
    workouts.start_workout(USER, "Current")
    before = cache.get(keys.active_workout_key(USER))

    workouts.delete_workout(USER, old.id)
    assert cache.get(keys.active_workout_key(USER)) == before


def test_delete_checks_existence_then_owner(workouts):
    with pytest.raises(NotFound):
        workouts.delete_workout(USER, 999)
    w = workouts.start_workout(OTHER, "Theirs")
    with pytest.raises(Forbidden):
        workouts.delete_workout(USER, w.id)


def test_order_index_is_gapless_from_zero(workouts):
    w = workouts.start_workout(USER, "Full body")
    indexes = [
        workouts.add_exercise(USER, w.id, name, sets({"reps": 5, "weight": 50})).order_index
        for name in ("Squat", "Bench", "Row")
    ]
    assert indexes == [0, 1, 2]


def test_order_index_after_delete_is_max_plus_one(workouts):
    w = workouts.start_workout(USER, "Full body")
    a = workouts.add_exercise(USER, w.id, "A", sets({"reps": 5, "weight": 50}))
    b = workouts.add_exercise(USER, w.id, "B", sets({"reps": 5, "weight": 50}))
    workouts.delete_exercise(USER, w.id, a.id)
    c = workouts.add_exercise(USER, w.id, "C", sets({"reps": 5, "weight": 50}))
    assert (b.order_index, c.order_index) == (1, 2)


def test_set_numbers_follow_input_order(workouts):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(
        USER,
        w.id,
        "Squat",
        sets({"reps": 5, "weight": 100}, {"reps": 3, "weight": 110}, {"reps": 1, "weight": 120}),
    )
    assert [s.set_number for s in ex.sets] == [1, 2, 3]
    assert [s.weight for s in ex.sets] == [100, 110, 120]


def test_bodyweight_sets_store_no_weight(workouts):
    w = workouts.start_workout(USER, "Calisthenics")
    ex = workouts.add_exercise(USER, w.id, "Pull-up", sets({"reps": 8, "weight": 20, "is_bodyweight": True}))
    assert ex.sets[0].weight is None
    assert ex.sets[0].is_bodyweight


def test_add_exercise_recaches_whole_session(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}, {"reps": 5, "weight": 105}))

    cached = json.loads(cache.get(keys.active_workout_key(USER)))
    assert [e["id"] for e in cached["exercises"]] == [ex.id]
    assert [s["set_number"] for s in cached["exercises"][0]["sets"]] == [1, 2]

    active = workouts.get_active_workout(USER)
    assert active.exercises[0].sets == ex.sets


def test_add_exercise_guards(workouts):
    with pytest.raises(NotFound):
        workouts.add_exercise(USER, 999, "Squat", sets({"reps": 5, "weight": 100}))

    theirs = workouts.start_workout(OTHER, "Theirs")
    with pytest.raises(Forbidden):
        workouts.add_exercise(USER, theirs.id, "Squat", sets({"reps": 5, "weight": 100}))

    mine = workouts.start_workout(USER, "Mine")
    workouts.complete_workout(USER, mine.id)
    with pytest.raises(InvalidState):
        workouts.add_exercise(USER, mine.id, "Squat", sets({"reps": 5, "weight": 100}))


def test_update_replaces_sets_and_renumbers(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(
        USER, w.id, "Squat",
        sets({"reps": 5, "weight": 100}, {"reps": 5, "weight": 100}, {"reps": 5, "weight": 100}),
    )
    updated = workouts.update_exercise(
        USER, w.id, ex.id, sets=sets({"reps": 8, "weight": 80}, {"reps": 6, "weight": 90})
    )
    assert updated.name == "Squat"
    assert [(s.set_number, s.reps, s.weight) for s in updated.sets] == [(1, 8, 80), (2, 6, 90)]

    cached = json.loads(cache.get(keys.active_workout_key(USER)))
    assert [s["reps"] for s in cached["exercises"][0]["sets"]] == [8, 6]


def test_update_name_only_keeps_sets(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    updated = workouts.update_exercise(USER, w.id, ex.id, name="Front Squat", sets=[])
    assert updated.name == "Front Squat"
    assert [s.id for s in updated.sets] == [s.id for s in ex.sets]
    assert workouts.get_active_workout(USER).exercises[0].name == "Front Squat"


def test_update_exercise_from_another_workout_forbidden(workouts):
    a = workouts.start_workout(USER, "A")
    b = workouts.start_workout(USER, "B")
    ex = workouts.add_exercise(USER, a.id, "Squat", sets({"reps": 5, "weight": 100}))
    with pytest.raises(Forbidden):
        workouts.update_exercise(USER, b.id, ex.id, name="Nope")
    with pytest.raises(Forbidden):
        workouts.delete_exercise(USER, b.id, ex.id)
    with pytest.raises(NotFound):
        workouts.update_exercise(USER, a.id, 999, name="Nope")


def test_update_on_completed_workout_is_invalid_state(workouts):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    workouts.complete_workout(USER, w.id)
    with pytest.raises(InvalidState):
        workouts.update_exercise(USER, w.id, ex.id, name="Late edit")
    with pytest.raises(InvalidState):
        workouts.delete_exercise(USER, w.id, ex.id)


def test_delete_exercise_recaches(workouts, cache):
    w = workouts.start_workout(USER, "Legs")
    keep = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    drop = workouts.add_exercise(USER, w.id, "Lunge", sets({"reps": 10, "weight": 20}))
    workouts.delete_exercise(USER, w.id, drop.id)

    cached = json.loads(cache.get(keys.active_workout_key(USER)))
    assert [e["id"] for e in cached["exercises"]] == [keep.id]
    assert [e.id for e in workouts.get_workout(w.id).exercises] == [keep.id]


def test_cache_outage_never_fails_calls(db):
    svc = WorkoutService(db, BrokenCache())
    w = svc.start_workout(USER, "Offline cache")
    ex = svc.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    svc.update_exercise(USER, w.id, ex.id, name="Back Squat")
    assert svc.get_active_workout(USER).exercises[0].name == "Back Squat"
    assert svc.complete_workout(USER, w.id).status == "completed"
    assert svc.get_active_workout(USER) is None
    svc.delete_workout(USER, w.id)


def test_repositories_list_in_order(workouts):
    w = workouts.start_workout(USER, "Legs")
    squat = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}, {"reps": 3, "weight": 110}))
    workouts.add_exercise(USER, w.id, "Lunge", sets({"reps": 10, "weight": 20}))

    listed = workouts.exercises.list_exercises_for_session(w.id)
    assert [(e.name, e.order_index) for e in listed] == [("Squat", 0), ("Lunge", 1)]
    assert [s.set_number for s in workouts.sets.list_sets_for_exercise(squat.id)] == [1, 2]
    assert workouts.sets.list_sets_for_exercise(999) == []


def test_database_rejects_non_positive_reps(workouts):
    w = workouts.start_workout(USER, "Legs")
    ex = workouts.add_exercise(USER, w.id, "Squat", sets({"reps": 5, "weight": 100}))
    with pytest.raises(StoreError):
        workouts.sets.create_set(ex.id, set_number=2, reps=0, weight=100, is_bodyweight=False)
    # rolled back; the session is still usable
    assert [s.set_number for s in workouts.sets.list_sets_for_exercise(ex.id)] == [1]
