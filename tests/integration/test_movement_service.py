"""Integration tests for the crew movement lifecycle."""

from datetime import date
from types import SimpleNamespace

import pytest

from models import CREW_ON_BOARD, CREW_OFF_BOARD, SIGN_ON, SIGN_OFF, Movement
from services import movement_service as ms
from services.movement_service import MovementError


def join(db, seed, crew, vessel=None, day=date(2025, 1, 10), **kw):
    return ms.join_crew(
        db,
        crew_code=crew.crew_code,
        vessel_id=(vessel or seed.pacific).id,
        port_id=seed.manila.id,
        sign_on_date=day,
        **kw,
    )


class TestJoin:
    def test_join_opens_sign_on_and_flips_status(self, db, seed):
        m = join(db, seed, seed.juan)

        assert m.transaction_type == SIGN_ON
        assert m.is_open
        assert m.rank_id == seed.ab.id  # crew's last known rank
        assert m.country_id == seed.ph.id
        db.refresh(seed.juan)
        assert seed.juan.crew_status_id == CREW_ON_BOARD
        assert seed.juan.current_vessel_id == seed.pacific.id

    def test_join_with_explicit_rank_updates_crew_rank(self, db, seed):
        m = join(db, seed, seed.juan, rank_id=seed.chief.id)
        assert m.rank_id == seed.chief.id
        assert seed.juan.rank_id == seed.chief.id

    def test_join_twice_is_conflict(self, db, seed, on_board):
        with pytest.raises(MovementError) as exc:
            join(db, seed, seed.juan, vessel=seed.luzon)
        assert exc.value.status_code == 409

    def test_join_inactive_vessel_rejected(self, db, seed):
        with pytest.raises(MovementError) as exc:
            join(db, seed, seed.juan, vessel=seed.retired)
        assert exc.value.status_code == 400
        assert "not active" in exc.value.message

    def test_join_inactive_crew_rejected(self, db, seed):
        with pytest.raises(MovementError) as exc:
            join(db, seed, seed.ana)
        assert exc.value.status_code == 400

    def test_join_without_any_rank_rejected(self, db, seed):
        with pytest.raises(MovementError) as exc:
            join(db, seed, seed.jose)
        assert "no rank" in exc.value.message

    def test_unknown_crew_is_404(self, db, seed):
        with pytest.raises(MovementError) as exc:
            ms.join_crew(db, crew_code="NOPE", vessel_id=seed.pacific.id,
                         port_id=seed.manila.id, sign_on_date=date(2025, 1, 1))
        assert exc.value.status_code == 404


class TestPromote:
    def test_promote_changes_crew_and_open_movement_rank(self, db, seed, on_board):
        m = ms.promote_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                            rank_id=seed.chief.id, promotion_date=date(2025, 3, 1))

        assert m.id == on_board.id
        assert m.rank_id == seed.chief.id
        assert m.promoted_at == date(2025, 3, 1)
        assert m.transaction_date == date(2025, 1, 10)  # sign-on date unchanged
        assert seed.juan.rank_id == seed.chief.id
        assert seed.juan.crew_status_id == CREW_ON_BOARD

    def test_same_rank_rejected(self, db, seed, on_board):
        with pytest.raises(MovementError) as exc:
            ms.promote_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                            rank_id=seed.ab.id, promotion_date=date(2025, 3, 1))
        assert exc.value.message == "The selected rank is the same as the current rank."

    def test_promote_on_other_vessel_is_conflict(self, db, seed, on_board):
        with pytest.raises(MovementError) as exc:
            ms.promote_crew(db, crew_code="CR250001", vessel_id=seed.luzon.id,
                            rank_id=seed.chief.id, promotion_date=date(2025, 3, 1))
        assert exc.value.status_code == 409

    def test_promotion_before_sign_on_rejected(self, db, seed, on_board):
        with pytest.raises(MovementError):
            ms.promote_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                            rank_id=seed.chief.id, promotion_date=date(2025, 1, 9))


class TestRepatriate:
    def test_repatriate_closes_sign_on(self, db, seed, on_board):
        off = ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                                 port_id=seed.singapore.id, sign_off_date=date(2025, 6, 30))

        assert off.transaction_type == SIGN_OFF
        assert off.sign_on_movement_id == on_board.id
        assert off.country_id == seed.sg.id
        assert not on_board.is_open
        assert seed.juan.crew_status_id == CREW_OFF_BOARD
        assert seed.juan.current_vessel_id is None
        assert ms.find_open_movement(db, seed.juan.id) is None

    def test_same_day_sign_off_allowed(self, db, seed, on_board):
        off = ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                                 port_id=seed.manila.id, sign_off_date=date(2025, 1, 10))
        assert off.transaction_date == on_board.transaction_date

    def test_sign_off_before_sign_on_rejected(self, db, seed, on_board):
        with pytest.raises(MovementError) as exc:
            ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                               port_id=seed.manila.id, sign_off_date=date(2025, 1, 9))
        assert exc.value.status_code == 400
        assert seed.juan.crew_status_id == CREW_ON_BOARD

    def test_off_board_crew_cannot_be_repatriated(self, db, seed):
        with pytest.raises(MovementError) as exc:
            ms.repatriate_crew(db, crew_code="CR250002", vessel_id=seed.pacific.id,
                               port_id=seed.manila.id, sign_off_date=date(2025, 1, 9))
        assert exc.value.status_code == 409

    def test_rejoin_after_repatriation(self, db, seed, on_board):
        ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                           port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        again = join(db, seed, seed.juan, vessel=seed.luzon, day=date(2025, 8, 1))

        assert again.is_open
        assert seed.juan.current_vessel_id == seed.luzon.id
        assert len(ms.crew_movements(db, "CR250001")) == 3

    def test_rejoin_before_last_sign_off_rejected(self, db, seed, on_board):
        ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                           port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        with pytest.raises(MovementError):
            join(db, seed, seed.juan, day=date(2025, 6, 1))


class TestBatches:
    def test_batch_join_reports_each_item(self, db, seed, on_board):
        items = [
            SimpleNamespace(crew_id=seed.maria.id, rank_id=0),
            SimpleNamespace(crew_id=seed.juan.id, rank_id=0),      # already on board
            SimpleNamespace(crew_id=seed.pedro.id, rank_id=seed.chief.id),
            SimpleNamespace(crew_id=9999, rank_id=0),
        ]
        results = ms.batch_join(db, vessel_id=seed.luzon.id, port_id=seed.cebu.id,
                                sign_on_date=date(2025, 2, 1), crew=items)

        assert [r["success"] for r in results] == [True, False, True, False]
        assert results[0]["crew_code"] == "CR250002"
        assert "already on board" in results[1]["message"]
        assert results[3]["crew_code"] is None

        roster = ms.vessel_roster(db, seed.luzon.id)
        assert {m.crew.crew_code for m in roster} == {"CR250002", "CR250003"}
        pedro = next(m for m in roster if m.crew.crew_code == "CR250003")
        assert pedro.rank_id == seed.chief.id
        # the failed item left Juan where he was
        assert seed.juan.current_vessel_id == seed.pacific.id

    def test_batch_repatriate_keeps_successes_when_one_fails(self, db, seed, on_board):
        join(db, seed, seed.maria)
        results = ms.batch_repatriate(db, vessel_id=seed.pacific.id, port_id=seed.manila.id,
                                      sign_off_date=date(2025, 5, 1),
                                      crew_codes=["CR250001", "CR250003", "CR250002"])

        assert [r["success"] for r in results] == [True, False, True]
        assert results[1]["crew_id"] == seed.pedro.id
        assert ms.vessel_roster(db, seed.pacific.id) == []


class TestEditMovement:
    def test_edit_sign_on_date_respects_sign_off(self, db, seed, on_board):
        ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                           port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        with pytest.raises(MovementError):
            ms.edit_movement(db, crew_code="CR250001", movement_id=on_board.id,
                             movement_date=date(2025, 7, 1))

        m = ms.edit_movement(db, crew_code="CR250001", movement_id=on_board.id,
                             movement_date=date(2025, 1, 5))
        assert m.transaction_date == date(2025, 1, 5)

    def test_edit_sign_off_date_respects_sign_on(self, db, seed, on_board):
        off = ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                                 port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        with pytest.raises(MovementError):
            ms.edit_movement(db, crew_code="CR250001", movement_id=off.id,
                             movement_date=date(2025, 1, 1))

    def test_vessel_change_moves_open_crew(self, db, seed, on_board):
        m = ms.edit_movement(db, crew_code="CR250001", movement_id=on_board.id,
                             movement_date=date(2025, 1, 10), vessel_id=seed.luzon.id,
                             rank_id=seed.master.id)
        assert m.vessel_id == seed.luzon.id
        assert seed.juan.current_vessel_id == seed.luzon.id
        assert seed.juan.rank_id == seed.master.id

    def test_vessel_change_applies_to_pair(self, db, seed, on_board):
        off = ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                                 port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        ms.edit_movement(db, crew_code="CR250001", movement_id=off.id,
                         movement_date=date(2025, 6, 30), vessel_id=seed.luzon.id)
        assert db.get(Movement, on_board.id).vessel_id == seed.luzon.id
        assert seed.juan.current_vessel_id is None

    def test_vessel_change_on_closed_stint_keeps_current_vessel(self, db, seed, on_board):
        ms.repatriate_crew(db, crew_code="CR250001", vessel_id=seed.pacific.id,
                           port_id=seed.manila.id, sign_off_date=date(2025, 6, 30))
        join(db, seed, seed.juan, vessel=seed.luzon, day=date(2025, 7, 5))

        m = ms.edit_movement(db, crew_code="CR250001", movement_id=on_board.id,
                             movement_date=date(2025, 1, 10), vessel_id=seed.retired.id)
        assert m.vessel_id == seed.retired.id
        assert m.sign_off.vessel_id == seed.retired.id
        assert seed.juan.current_vessel_id == seed.luzon.id

    def test_movement_of_other_crew_is_404(self, db, seed, on_board):
        with pytest.raises(MovementError) as exc:
            ms.edit_movement(db, crew_code="CR250002", movement_id=on_board.id,
                             movement_date=date(2025, 1, 10))
        assert exc.value.status_code == 404
