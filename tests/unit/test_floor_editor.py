"""Unit tests for single floor entry edits."""

import pytest

from buildplan.config.errors import ErrorCode
from buildplan.engine.floor_editor import edit_floor_entry
from buildplan.engine.mutation import PlanDraft


def _edit(plan, **kwargs):
    draft = PlanDraft(plan)
    edit_floor_entry(draft, **kwargs)
    return draft.commit(), draft.issues


class TestEditFloorEntry:
    """Tests for edit_floor_entry()."""

    def test_quantity_edit(self, prepared_plan):
        plan, issues = _edit(prepared_plan, material="Cement", floor=1, new_quantity=25)

        assert issues == []
        assert plan.entries_for("Cement")[1].quantity == 25
        assert plan.total_cost == pytest.approx(1266000)

    def test_discrete_quantity_rounded_half_up(self, prepared_plan):
        plan, _ = _edit(prepared_plan, material="Cement", floor=1, new_quantity=20.5)

        assert plan.entries_for("Cement")[1].quantity == 21

    def test_continuous_quantity_kept_fractional(self, prepared_plan):
        plan, _ = _edit(prepared_plan, material="Steel", floor=0, new_quantity=1.75)

        assert plan.entries_for("Steel")[0].quantity == 1.75

    def test_price_edit(self, prepared_plan):
        plan, _ = _edit(prepared_plan, material="Steel", floor=2, new_unit_price=70000)

        steel_item = plan.section("Materials").items[1]
        assert steel_item.cost == pytest.approx(385000)
        assert plan.total_cost == pytest.approx(1289000)

    def test_quantity_and_price_together(self, prepared_plan):
        plan, _ = _edit(prepared_plan, material="Cement", floor=0, new_quantity=0, new_unit_price=500)

        entry = plan.entries_for("Cement")[0]
        assert entry.quantity == 0
        assert entry.unit_price == 500

    @pytest.mark.parametrize("bad_value", [-5, float("nan"), float("inf"), "12", True])
    def test_invalid_quantity_ignored(self, prepared_plan, bad_value):
        plan, issues = _edit(prepared_plan, material="Cement", floor=1, new_quantity=bad_value)

        assert [issue.code for issue in issues] == [ErrorCode.INVALID_QUANTITY]
        assert plan.entries_for("Cement")[1].quantity == 20

    def test_invalid_price_ignored_but_quantity_applied(self, prepared_plan):
        plan, issues = _edit(
            prepared_plan, material="Cement", floor=1, new_quantity=22, new_unit_price=-1
        )

        assert [issue.code for issue in issues] == [ErrorCode.INVALID_PRICE]
        assert plan.entries_for("Cement")[1].quantity == 22
        assert plan.entries_for("Cement")[1].unit_price == 400

    def test_unknown_material(self, prepared_plan):
        plan, issues = _edit(prepared_plan, material="Granite", floor=1, new_quantity=5)

        assert [issue.code for issue in issues] == [ErrorCode.MATERIAL_NOT_FOUND]
        assert plan == prepared_plan

    def test_unknown_floor(self, prepared_plan):
        plan, issues = _edit(prepared_plan, material="Cement", floor=7, new_quantity=5)

        assert [issue.code for issue in issues] == [ErrorCode.MATERIAL_NOT_FOUND]
        assert plan.material_total("Cement") == 60

    def test_base_plan_unchanged(self, prepared_plan):
        _edit(prepared_plan, material="Cement", floor=1, new_quantity=99)

        assert prepared_plan.entries_for("Cement")[1].quantity == 20
        assert prepared_plan.total_cost == 1264000

    def test_rejected_input_leaves_totals_alone(self, unbalanced_plan):
        plan, issues = _edit(unbalanced_plan, material="Cement", floor=0, new_quantity=-5)

        assert [issue.code for issue in issues] == [ErrorCode.INVALID_QUANTITY]
        assert plan == unbalanced_plan

    def test_unknown_floor_leaves_totals_alone(self, unbalanced_plan):
        plan, _ = _edit(unbalanced_plan, material="Cement", floor=7, new_quantity=5)

        assert plan.total_cost == 1276345
