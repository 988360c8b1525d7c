import pytest
from unittest.mock import patch

from stall_recovery.guards import SIGNAL_LEVEL_MODERATE
from stall_recovery.recovery_action import RecoveryAction
from stall_recovery.recovery_policy import ConfigurationError, RecoveryPolicy


# ==================================
# TEST GROUP: Construction / Validation
# ==================================
@pytest.mark.parametrize(
    "delays, skips",
    [
        # ❌ Empty table
        ([], []),

        # ❌ Length mismatch (one delay short)
        ([1, 1], [False, False, False]),

        # ❌ More steps than recovery actions
        ([1, 1, 1, 1], [False, False, False, False]),

        # ❌ Negative delay
        ([1, -5, 1], [False, False, False]),
    ],
)
def test_invalid_tables_rejected(delays, skips):
    with pytest.raises(ConfigurationError):
        RecoveryPolicy.from_arrays(delays, skips)

def test_policy_is_immutable():
    policy = RecoveryPolicy.from_arrays([1, 2, 3], [False, False, False])

    with pytest.raises(AttributeError):
        policy.delays_s = (9, 9, 9)

    assert policy.delays_s == (1.0, 2.0, 3.0)
    assert policy.skips == (False, False, False)


# ==================================
# TEST GROUP: Step Selection
# ==================================
@pytest.mark.parametrize(
    "skips, current, expected",
    [
        # ✅ Plain one-step escalation
        ((False, False, False), RecoveryAction.NONE, RecoveryAction.REESTABLISH_INTERNET),
        ((False, False, False), RecoveryAction.REESTABLISH_INTERNET, RecoveryAction.RADIO_POWER_CYCLE),

        # ✅ Skipped step is jumped over
        ((False, True, False), RecoveryAction.REESTABLISH_INTERNET, RecoveryAction.MODEM_REBOOT),
        ((True, True, False), RecoveryAction.NONE, RecoveryAction.MODEM_REBOOT),

        # ✅ Capped at the final step
        ((False, False, False), RecoveryAction.MODEM_REBOOT, RecoveryAction.MODEM_REBOOT),

        # ✅ Nothing eligible beyond current → stay
        ((False, False, True), RecoveryAction.RADIO_POWER_CYCLE, RecoveryAction.RADIO_POWER_CYCLE),

        # ❌ Every step skipped
        ((True, True, True), RecoveryAction.NONE, RecoveryAction.NONE),
    ],
)
def test_next_step(skips, current, expected):
    policy = RecoveryPolicy.from_arrays([1, 1, 1], skips)

    assert policy.next_step(current) == expected

def test_radio_gate_marks_radio_steps_ineligible():
    policy = RecoveryPolicy.from_arrays([1, 1, 1], [False] * 3, allow_radio_actions=False)

    assert policy.is_eligible(RecoveryAction.REESTABLISH_INTERNET)
    assert not policy.is_eligible(RecoveryAction.RADIO_POWER_CYCLE)
    assert not policy.is_eligible(RecoveryAction.MODEM_REBOOT)

def test_delay_for_each_step():
    policy = RecoveryPolicy.from_arrays([10, 20, 30], [False] * 3)

    assert policy.delay_for(RecoveryAction.NONE) == 10
    assert policy.delay_for(RecoveryAction.REESTABLISH_INTERNET) == 10
    assert policy.delay_for(RecoveryAction.RADIO_POWER_CYCLE) == 20
    assert policy.delay_for(RecoveryAction.MODEM_REBOOT) == 30

def test_short_ladder_final_step():
    policy = RecoveryPolicy.from_arrays([5], [False])

    assert policy.final_step == RecoveryAction.REESTABLISH_INTERNET
    assert not policy.is_eligible(RecoveryAction.RADIO_POWER_CYCLE)
    assert policy.delay_for(RecoveryAction.MODEM_REBOOT) == 5

def test_summary_lists_steps():
    policy = RecoveryPolicy.from_arrays([1, 2, 3], [False, True, False])

    summary = policy.summary()

    assert [step["action"] for step in summary["steps"]] == [
        "REESTABLISH_INTERNET", "RADIO_POWER_CYCLE", "MODEM_REBOOT",
    ]
    assert [step["skipped"] for step in summary["steps"]] == [False, True, False]
    assert summary["poor_signal_threshold"] == 2


# ==================================
# TEST GROUP: Environment Loading
# ==================================
class MockConfig:
    RECOVERY_DELAYS_S = "60, 120,300"
    RECOVERY_SKIP_STEPS = "false,yes,0"
    POOR_SIGNAL_THRESHOLD = 3
    REESTABLISH_DURING_CALL = False
    ALLOW_RADIO_RECOVERY = True

def test_from_env():
    with patch("stall_recovery.recovery_policy.Config", MockConfig):
        policy = RecoveryPolicy.from_env()

    assert policy.delays_s == (60.0, 120.0, 300.0)
    assert policy.skips == (False, True, False)
    assert policy.poor_signal_threshold == 3
    assert policy.reestablish_during_call is False

@pytest.mark.parametrize(
    "delays, skips",
    [
        # ❌ Not a number
        ("60,soon,300", "false,false,false"),

        # ❌ Not a boolean
        ("60,120,300", "false,maybe,false"),

        # ❌ Mismatched after parsing
        ("60,120", "false,false,false"),
    ],
)
def test_from_env_invalid(delays, skips):
    class BadConfig(MockConfig):
        RECOVERY_DELAYS_S = delays
        RECOVERY_SKIP_STEPS = skips

    with patch("stall_recovery.recovery_policy.Config", BadConfig):
        with pytest.raises(ConfigurationError):
            RecoveryPolicy.from_env()

def test_default_threshold_is_moderate_signal():
    policy = RecoveryPolicy.from_arrays([1], [False])

    assert policy.poor_signal_threshold == SIGNAL_LEVEL_MODERATE
