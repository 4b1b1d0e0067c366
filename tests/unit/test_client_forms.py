"""Client forms: validation, state transitions and payload shapes."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from client.api import ApiResult
from client.forms import (
    BatchJoinForm,
    EditMovementForm,
    ForexForm,
    FormState,
    JoinForm,
    PhilhealthRateForm,
    PromoteForm,
    RepatriateForm,
    SalaryScaleForm,
    SSSRateForm,
    StatusEditForm,
    build_batch_join_payload,
)
from client.lookups import Lookups


@pytest.fixture
def api():
    fake = MagicMock()
    for name in ("promote_crew", "join_crew", "batch_sign_on", "repatriate_crew", "batch_repatriate",
                 "edit_movement", "add_salary_scale", "update_salary_scale", "add_government_rate",
                 "update_government_rate", "add_forex", "update_forex",
                 "update_deduction_status", "update_remittance_status"):
        getattr(fake, name).return_value = ApiResult(success=True, data={}, message="done")
    return fake


def promote_form(api, **values):
    return PromoteForm(api, vessel_id=1, crew_code="CR250001", current_rank_id=3,
                       sign_on_date="2025-01-10", **values)


class TestLifecycle:
    def test_success_returns_to_viewing(self, api):
        form = promote_form(api).edit(rank_id=2, promotion_date="2025-03-01")
        assert form.state is FormState.EDITING

        res = form.submit()

        assert res.success
        assert form.state is FormState.VIEWING
        assert form.message == "done"
        api.promote_crew.assert_called_once_with(1, "CR250001", rank_id=2, promotion_date=date(2025, 3, 1))

    def test_api_failure_goes_to_error_with_message(self, api):
        api.promote_crew.return_value = ApiResult(success=False, message="Crew is not on board", status_code=409)
        form = promote_form(api).edit(rank_id=2, promotion_date="2025-03-01")

        res = form.submit()

        assert not res.success
        assert res.status_code == 409
        assert form.state is FormState.ERROR
        assert form.message == "Crew is not on board"

    def test_cancel_discards_error(self, api):
        form = promote_form(api).edit(rank_id=3, promotion_date="2025-03-01")
        form.submit()
        form.cancel()
        assert form.state is FormState.VIEWING
        assert form.message is None

    def test_second_submit_while_submitting_is_refused(self, api):
        form = promote_form(api).edit(rank_id=2, promotion_date="2025-03-01")
        inner = {}

        def reenter(*args, **kwargs):
            inner["result"] = form.submit()
            with pytest.raises(RuntimeError):
                form.edit(rank_id=1)
            return ApiResult(success=True)

        api.promote_crew.side_effect = reenter
        assert form.submit().success
        assert inner["result"].success is False
        assert api.promote_crew.call_count == 1


class TestPromote:
    def test_same_rank_blocked_without_api_call(self, api):
        form = promote_form(api).edit(rank_id=3, promotion_date="2025-03-01")
        res = form.submit()
        assert res.message == "The selected rank is the same as the current rank."
        assert form.state is FormState.ERROR
        api.promote_crew.assert_not_called()

    def test_same_rank_as_text_blocked(self, api):
        form = promote_form(api).edit(rank_id="3", promotion_date="2025-03-01")
        assert not form.submit().success

    def test_required_fields(self, api):
        res = promote_form(api).edit(promotion_date="2025-03-01").submit()
        assert res.message == "Rank is required"

    def test_promotion_before_sign_on(self, api):
        res = promote_form(api).edit(rank_id=2, promotion_date="2025-01-01").submit()
        assert res.message == "Promotion date cannot be before the sign-on date"


class TestJoin:
    def test_not_before_last_sign_off(self, api):
        form = JoinForm(api, crew_code="CR250001", last_sign_off_date="2025-06-30")
        res = form.edit(vessel_id=1, port_id=2, sign_on_date="2025-06-01").submit()
        assert not res.success
        api.join_crew.assert_not_called()

    def test_sends_join(self, api):
        form = JoinForm(api, crew_code="CR250001", last_sign_off_date="2025-06-30")
        form.edit(vessel_id="1", port_id="2", sign_on_date=date(2025, 6, 30)).submit()
        api.join_crew.assert_called_once_with(1, "CR250001", port_id=2,
                                              sign_on_date=date(2025, 6, 30), rank_id=None)


class TestBatchJoin:
    def test_payload_has_one_entry_per_crew(self):
        selected = [{"id": 1, "rankId": 3}, {"crewId": 2}, {"crew_id": 5, "rank_id": None}]
        payload = build_batch_join_payload(selected, vessel_id=4, port_id=7, sign_on_date="2025-02-01")
        assert payload == {
            "crew": [
                {"crewId": 1, "rankId": 3},
                {"crewId": 2, "rankId": 0},
                {"crewId": 5, "rankId": 0},
            ],
            "vesselId": 4,
            "portId": 7,
            "signOnDate": date(2025, 2, 1),
        }

    def test_empty_selection(self, api):
        res = BatchJoinForm(api).edit(vessel_id=1, port_id=1, sign_on_date="2025-02-01").submit()
        assert res.message == "Select at least one crew member"
        api.batch_sign_on.assert_not_called()

    def test_submits_batch(self, api):
        form = BatchJoinForm(api, selected=[{"id": 1}, {"id": 2}])
        form.edit(vessel_id=1, port_id=1, sign_on_date="2025-02-01").submit()
        sent = api.batch_sign_on.call_args.args[0]
        assert len(sent["crew"]) == 2


class TestRepatriate:
    CREW = [
        {"crewCode": "CR250001", "vesselId": 1, "signOnDate": "2025-01-10"},
        {"crewCode": "CR250002", "vesselId": 1, "signOnDate": "2025-02-01"},
    ]

    def test_mixed_vessels_blocked(self, api):
        crew = [self.CREW[0], {**self.CREW[1], "vesselId": 2}]
        res = RepatriateForm(api, crew_members=crew).edit(port_id=1, sign_off_date="2025-06-30").submit()
        assert res.message == "All selected crew members must belong to the same vessel."
        api.batch_repatriate.assert_not_called()

    def test_sign_off_before_any_sign_on_blocked(self, api):
        res = RepatriateForm(api, crew_members=self.CREW).edit(port_id=1, sign_off_date="2025-01-20").submit()
        assert not res.success

    def test_single_uses_single_endpoint(self, api):
        RepatriateForm(api, crew_members=self.CREW[:1]).edit(port_id=1, sign_off_date="2025-06-30").submit()
        api.repatriate_crew.assert_called_once()
        api.batch_repatriate.assert_not_called()

    def test_many_use_batch_endpoint(self, api):
        RepatriateForm(api, crew_members=self.CREW).edit(port_id=1, sign_off_date="2025-06-30").submit()
        args = api.batch_repatriate.call_args
        assert args.args == (1, ["CR250001", "CR250002"])
        assert args.kwargs["sign_off_date"] == date(2025, 6, 30)


class TestEditMovement:
    def test_sign_on_row_edits_only_sign_on_date(self, api):
        form = EditMovementForm(api, crew_code="CR250001", movement={
            "id": 9, "transactionType": 1, "transactionDate": "2025-01-10", "rankId": 3, "vesselId": 1,
        })
        assert form.is_editable("sign_on_date")
        assert not form.is_editable("sign_off_date")

        res = form.edit(sign_off_date="2025-06-30").submit()
        assert res.message == "Sign-off date cannot be edited on this movement"
        api.edit_movement.assert_not_called()

    def test_sign_off_row_sends_its_date(self, api):
        form = EditMovementForm(api, crew_code="CR250001", movement={
            "id": 10, "transactionType": 2, "transactionDate": "2025-06-30", "rankId": 3, "vesselId": 1,
        })
        assert form.date_field == "sign_off_date"
        form.edit(sign_off_date="2025-07-01").submit()
        api.edit_movement.assert_called_once_with("CR250001", 10, movement_date=date(2025, 7, 1),
                                                  rank_id=3, vessel_id=1)


class TestRateForms:
    def test_reversed_salary_band(self, api):
        form = SSSRateForm(api).edit(year=2025, salary_from=5000, salary_to=4000)
        res = form.submit()
        assert res.message == "Salary From must be less than or equal to Salary To"
        api.add_government_rate.assert_not_called()

    def test_negative_value(self, api):
        res = PhilhealthRateForm(api).edit(year=2025, salary_from=0, salary_to=10000, premium=-5).submit()
        assert res.message == "Premium must be a positive number"

    def test_philhealth_payload_carries_type(self, api):
        PhilhealthRateForm(api).edit(year=2025, salary_from=0, salary_to=10000, premium_rate="0.05").submit()
        assert api.add_government_rate.call_args.args[0] == {
            "year": 2025, "salaryFrom": 0, "salaryTo": 10000, "premiumRate": "0.05", "type": "PHILHEALTH",
        }

    def test_salary_scale_edit_payload(self, api):
        form = SalaryScaleForm(api, item_id=4, rank_id=2, wage_id=1, wage_amount=900, year=2025)
        form.edit(wage_amount=950).submit()
        api.update_salary_scale.assert_called_once_with(4, {"wageRank": 2, "wageType": 1, "wageAmount": 950})

    def test_locked_forex_cannot_be_edited(self, api):
        res = ForexForm(api, item_id=1, locked_period=(2000, 1)).edit(exchange_rate=50).submit()
        assert res.message == "Forex rates of past months cannot be changed"
        api.update_forex.assert_not_called()

    def test_forex_rate_must_be_positive(self, api):
        res = ForexForm(api).edit(year=2099, month=1, exchange_rate=0).submit()
        assert res.message == "Exchange rate must be greater than 0"

    def test_forex_month_range(self, api):
        res = ForexForm(api).edit(year=2099, month=13, exchange_rate=58).submit()
        assert res.message == "Month must be between 1 and 12"


class TestStatusEdit:
    def test_routes_by_kind(self, api):
        StatusEditForm(api, kind="remittance", crew_code="CR250001", entry_id=3).edit(status=1).submit()
        api.update_remittance_status.assert_called_once_with("CR250001", 3, 1)
        api.update_deduction_status.assert_not_called()

    def test_invalid_status(self, api):
        res = StatusEditForm(api, kind="deduction", crew_code="CR250001", entry_id=3).edit(status=9).submit()
        assert res.message == "Invalid status"

    def test_unknown_kind(self, api):
        with pytest.raises(ValueError):
            StatusEditForm(api, kind="payroll", crew_code="CR250001", entry_id=3)


class TestLookups:
    def test_load_and_reset(self, api):
        api.list_ranks.return_value = ApiResult(success=True, data=[{"id": 1, "name": "Master"}])
        api.list_vessels.return_value = ApiResult(success=True, data=[{"id": 1}])
        api.list_ports.return_value = ApiResult(success=True, data=[
            {"id": 1, "countryId": 1}, {"id": 2, "countryId": 2},
        ])
        api.list_countries.return_value = ApiResult(success=True, data=[{"id": 1}, {"id": 2}])

        lookups = Lookups(api)
        assert lookups.load().success
        assert lookups.loaded
        assert lookups.rank_name(1) == "Master"
        assert [p["id"] for p in lookups.ports_in(2)] == [2]

        lookups.reset()
        assert lookups.ranks == [] and not lookups.loaded

    def test_failure_leaves_lists_empty(self, api):
        api.list_ranks.return_value = ApiResult(success=True, data=[{"id": 1}])
        api.list_vessels.return_value = ApiResult(success=False, message="timeout")
        lookups = Lookups(api)
        res = lookups.load()
        assert res.message == "Failed to load vessels: timeout"
        assert lookups.ranks == []
