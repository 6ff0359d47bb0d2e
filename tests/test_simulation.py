from __future__ import annotations

import logging

import pytest

from gbnsim.config import RoundPolicy, SimConfig
from gbnsim.simulation import EventKind, RoundOutcome, Simulation, simulate

DELIVER = 0.0
DROP = 0.99


def kinds(result, round_number):
    return [e.kind for e in result.trace if e.round == round_number]


def test_perfect_link_early_exit_advances_one_per_round():
    result = simulate(SimConfig(data_success_prob=1.0, ack_success_prob=1.0, seed=0))
    assert result.converged
    assert result.rounds == 10
    assert result.base_history == list(range(11))
    assert result.timeouts == 0


def test_perfect_link_full_window_advances_whole_window():
    cfg = SimConfig(
        total_packets=10,
        window_size=3,
        data_success_prob=1.0,
        ack_success_prob=1.0,
        round_policy=RoundPolicy.FULL_WINDOW,
        seed=0,
    )
    result = simulate(cfg)
    assert result.converged
    assert result.rounds == 4
    assert result.base_history == [0, 3, 6, 9, 10]
    assert result.timeouts == 0
    assert all(r.outcome is RoundOutcome.ADVANCED for r in result.reports)


def test_dead_data_link_times_out_up_to_cap():
    result = simulate(SimConfig(data_success_prob=0.0, max_rounds=25, seed=3))
    assert not result.converged
    assert result.rounds == 25
    assert result.timeouts == 25
    assert set(result.base_history) == {0}
    assert all(r.outcome is RoundOutcome.TIMEOUT for r in result.reports)


def test_dead_ack_link_never_converges():
    result = simulate(SimConfig(data_success_prob=1.0, ack_success_prob=0.0, max_rounds=10, seed=3))
    assert not result.converged
    assert result.base_history[-1] == 0


def test_seeded_runs_are_deterministic():
    cfg = SimConfig(seed=42, max_rounds=500)
    a = Simulation(cfg).run()
    b = Simulation(cfg).run()
    assert a.trace == b.trace
    assert a.base_history == b.base_history
    assert a.reports == b.reports


@pytest.mark.parametrize("policy", list(RoundPolicy))
@pytest.mark.parametrize("seed", range(15))
def test_base_is_monotonic_and_bounded(policy, seed):
    cfg = SimConfig(seed=seed, round_policy=policy)
    result = simulate(cfg)
    history = result.base_history
    assert all(a <= b for a, b in zip(history, history[1:]))
    assert all(0 <= b <= cfg.total_packets for b in history)
    assert result.converged
    assert history[-1] == cfg.total_packets


def test_discard_reannouncement_unsticks_sender(scripted):
    # round 1: packets 0..2 all accepted but every ack is lost
    # round 2: resent packet 0 is discarded; the re-announced ack survives
    draws = [DELIVER, DROP, DELIVER, DROP, DELIVER, DROP, DELIVER, DELIVER]
    cfg = SimConfig(total_packets=10, window_size=3, data_success_prob=0.5, ack_success_prob=0.5)
    sim = Simulation(cfg, rng=scripted(draws))

    first = sim.run_round()
    assert first.outcome is RoundOutcome.TIMEOUT
    assert first.base_after == 0
    assert sim.receiver.expected == 3

    second = sim.run_round()
    discard = [e for e in sim.trace if e.round == 2 and e.kind is EventKind.DISCARD]
    assert discard[0].seq == 0
    assert discard[0].value == 3
    ack_sent = [e for e in sim.trace if e.round == 2 and e.kind is EventKind.ACK_SENT]
    assert ack_sent[0].value == 3
    assert second.outcome is RoundOutcome.ADVANCED
    assert sim.sender.base == 3


def test_final_packet_sends_no_ack_but_run_completes():
    cfg = SimConfig(total_packets=2, window_size=2, data_success_prob=1.0, ack_success_prob=1.0, seed=1)
    result = simulate(cfg)
    assert result.converged
    assert result.base_history == [0, 1, 2]
    assert EventKind.ACK_SENT not in kinds(result, 2)
    assert EventKind.FINAL_CONFIRMED in kinds(result, 2)
    assert result.metrics.acks_sent == 1


def test_lost_final_confirmation_is_retried(scripted):
    draws = [DELIVER, DELIVER, DELIVER, DROP, DELIVER, DELIVER]
    cfg = SimConfig(total_packets=2, window_size=2, data_success_prob=0.5, ack_success_prob=0.5)
    result = Simulation(cfg, rng=scripted(draws)).run()
    assert result.converged
    assert [r.outcome for r in result.reports] == [
        RoundOutcome.ADVANCED,
        RoundOutcome.TIMEOUT,
        RoundOutcome.ADVANCED,
    ]
    assert result.base_history == [0, 1, 1, 2]


def test_ack_final_packet_acknowledges_last_segment():
    cfg = SimConfig(
        data_success_prob=1.0,
        ack_success_prob=1.0,
        round_policy=RoundPolicy.FULL_WINDOW,
        ack_final_packet=True,
        seed=0,
    )
    result = simulate(cfg)
    assert result.base_history == [0, 3, 6, 9, 10]
    assert result.metrics.acks_sent == 10
    assert EventKind.FINAL_CONFIRMED not in [e.kind for e in result.trace]


def test_duplicate_ack_ends_round_without_timeout(scripted):
    # packet 0 lost, packet 1 discarded, its ack re-announces 0
    draws = [DROP, DELIVER, DELIVER]
    cfg = SimConfig(total_packets=10, window_size=3, data_success_prob=0.5, ack_success_prob=0.5)
    sim = Simulation(cfg, rng=scripted(draws))
    report = sim.run_round()
    assert report.outcome is RoundOutcome.DUPLICATE_ACK
    assert report.base_after == 0
    assert sim.sender.metrics.timeouts == 0
    assert sim.elapsed_ms == cfg.pacing_ms


def test_timeouts_and_pacing_go_through_sleep():
    slept = []
    cfg = SimConfig(data_success_prob=0.0, max_rounds=2, timeout_ms=2000, pacing_ms=500, seed=0)
    result = Simulation(cfg, sleep=slept.append).run()
    assert slept == [2.0, 0.5, 2.0, 0.5]
    assert result.elapsed_ms == 5000


def test_narration_is_logged(caplog):
    caplog.set_level(logging.INFO)
    simulate(SimConfig(total_packets=2, data_success_prob=1.0, ack_success_prob=1.0, seed=0))
    assert "[Sender] Sending packet 0" in caplog.text
    assert "[Receiver] Received expected packet 1" in caplog.text
    assert "All packets have been successfully sent and acknowledged" in caplog.text


def test_non_convergence_is_logged_as_warning(caplog):
    caplog.set_level(logging.INFO)
    simulate(SimConfig(data_success_prob=0.0, max_rounds=3, seed=0))
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings and "no convergence after 3 rounds" in warnings[0].getMessage()
