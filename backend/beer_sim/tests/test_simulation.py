from beer_sim.schemas.game import ROLE_SEQUENCE, GamePhase, GameSettings, PlayerRole
from beer_sim.services.metrics import bullwhip_ratio
from beer_sim.services.policies import BaseStockPolicy, NaiveEchoPolicy, make_policy, observe
from beer_sim.services.simulation import apply_policies, run_simulation


def test_naive_policy_echoes_last_incoming_order():
    policy = NaiveEchoPolicy()

    assert policy.order({"last_incoming_order": 7}) == 7
    assert policy.order({"last_incoming_order": -2}) == 0


def test_base_stock_policy_closes_the_gap():
    policy = BaseStockPolicy(base_stock=20)

    # position 12 + 4 - 2 = 14, gap 6, anchor 4
    assert policy.order({"inventory": 12, "incoming_shipment": 4, "backlog": 2, "last_incoming_order": 4}) == 10
    assert policy.order({"inventory": 40, "last_incoming_order": 4}) == 0


def test_make_policy_by_name():
    assert isinstance(make_policy("naive"), NaiveEchoPolicy)
    assert make_policy("base_stock", base_stock=30).base_stock == 30


def test_observation_anchors_on_default_demand_before_first_week(playing_state):
    obs = observe(playing_state, playing_state.participants[1])

    assert obs["last_incoming_order"] == 4
    assert obs["week"] == 1


def test_apply_policies_leaves_input_untouched(playing_state):
    policies = {role: BaseStockPolicy(base_stock=30) for role in ROLE_SEQUENCE}

    decided = apply_policies(playing_state, policies)

    assert all(p.outgoing_order == 4 for p in playing_state.participants)
    assert all(p.outgoing_order == 22 for p in decided.participants)


def test_run_simulation_plays_every_week():
    state = run_simulation(GameSettings(total_weeks=12))

    assert state.game_phase == GamePhase.FINISHED
    assert state.current_week == 13
    for participant in state.participants:
        assert len(participant.weekly_orders) == 12
        assert participant.inventory >= 0
        assert participant.backlog >= 0


def test_naive_chain_shows_the_demand_step_upstream():
    state = run_simulation(GameSettings())

    retailer = state.participant(PlayerRole.RETAILER)
    factory = state.participant(PlayerRole.FACTORY)
    assert max(retailer.weekly_orders) == 8
    assert max(factory.weekly_orders) == 8
    assert bullwhip_ratio(state.participants) > 0
