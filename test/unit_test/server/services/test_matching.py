import pytest

from diligence_labs.core.database.entities.experts import ExpertProfile
from diligence_labs.core.database.entities.projects import Project
from diligence_labs.server.services.matching import (
    active_assignment_limit,
    assignment_reputation,
    available_slots,
    evaluation_progress,
    expertise_match_score,
    is_tier_compatible,
    match_project,
    submission_reputation,
)


class TestTierCompatibility:
    @pytest.mark.parametrize(
        "tier,budget,priority,expected",
        [
            ("BRONZE", 20000, "MEDIUM", True),
            ("BRONZE", 20001, "MEDIUM", False),
            ("BRONZE", 5000, "HIGH", False),
            ("BRONZE", None, "URGENT", False),
            ("SILVER", 50000, "URGENT", True),
            ("SILVER", 50001, "LOW", False),
            ("GOLD", 10**7, "URGENT", True),
            ("PLATINUM", 10**7, "HIGH", True),
            ("DIAMOND", None, "LOW", True),
            ("UNRANKED", 10000, "LOW", True),
            ("UNRANKED", 10001, "LOW", False),
        ],
    )
    def test_matrix(self, tier, budget, priority, expected):
        assert is_tier_compatible(tier, budget, priority) is expected

    @pytest.mark.parametrize("tier", ["PLATINUM", "DIAMOND"])
    def test_tiers_above_gold_are_unrestricted(self, tier):
        # Not held to the fallback 10000 cap that unknown tiers get
        assert is_tier_compatible(tier, 10001, "LOW") is True
        assert is_tier_compatible(tier, 250000, "URGENT") is True


class TestExpertiseMatch:
    def test_category_match(self):
        assert expertise_match_score(["DeFi"], "defi", [], None) == 100

    def test_technology_and_blockchain_points(self):
        assert expertise_match_score(["solidity", "ethereum"], "NFT", ["Solidity", "Rust"], "Ethereum") == 50

    def test_substring_matches_both_ways(self):
        assert expertise_match_score(["solidity smart contracts"], None, ["solidity"], None) == 20
        assert expertise_match_score(["rust"], None, ["rust-lang"], None) == 20

    def test_score_is_capped(self):
        score = expertise_match_score(["defi", "solidity", "ethereum"], "DeFi", ["solidity"] * 5, "ethereum")

        assert score == 100

    def test_no_overlap(self):
        assert expertise_match_score(["gaming"], "DeFi", ["solidity"], "solana") == 0

    def test_malformed_entries_score_zero(self):
        assert expertise_match_score(None, "DeFi", [], None) == 0

    def test_match_project_uses_both_expertise_lists(self):
        profile = ExpertProfile(user_id="u1")
        profile.set_primary_expertise_list(["nft"])
        profile.set_secondary_expertise_list(["solana"])
        project = Project(name="p", description="d", category="Gaming", submitter_id="u2", blockchain="Solana")
        project.set_technology_stack_list(["NFT marketplace"])

        assert match_project(profile, project) == 50


def test_available_slots():
    assert available_slots(0) == 3
    assert available_slots(2) == 1
    assert available_slots(5) == 0


def test_evaluation_progress():
    assert evaluation_progress(0, 0) == 0
    assert evaluation_progress(1, 3) == 33
    assert evaluation_progress(2, 3) == 67
    assert evaluation_progress(3, 3) == 100


@pytest.mark.parametrize("tier,limit", [("GOLD", 10), ("SILVER", 7), ("BRONZE", 5), ("DIAMOND", 5)])
def test_active_assignment_limit(tier, limit):
    assert active_assignment_limit(tier) == limit


def test_assignment_reputation():
    assert assignment_reputation("PRIMARY") == 25
    assert assignment_reputation("SECONDARY") == 15


@pytest.mark.parametrize(
    "tier,points",
    [("BASIC", 25), ("VERIFIED", 30), ("PREMIUM", 37), ("VC", 50), ("ECOSYSTEM_PARTNER", 75), ("OTHER", 25)],
)
def test_submission_reputation(tier, points):
    assert submission_reputation(tier) == points
