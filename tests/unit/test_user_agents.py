"""Unit tests for user agent rotation."""

from unittest.mock import patch

from markharvest.core.harvesting.user_agents import Platform, UserAgent, random_user_agent


def test_pool_spans_desktop_and_mobile():
    """Test the pool covers both platform families."""
    platforms = {agent.platform for agent in UserAgent}

    assert platforms == {Platform.DESKTOP, Platform.MOBILE}
    assert len(list(UserAgent)) == 12


def test_header_values_look_like_browsers():
    """Test every entry is a realistic, unique Mozilla-style string."""
    values = [str(agent) for agent in UserAgent]

    assert len(set(values)) == len(values)
    assert all(value.startswith("Mozilla/5.0 (") for value in values)


def test_random_user_agent_returns_member():
    """Test the picker returns a member of the pool."""
    assert random_user_agent() in set(UserAgent)


def test_random_user_agent_respects_platform():
    """Test restricting the picker to mobile agents."""
    for _ in range(20):
        assert random_user_agent(Platform.MOBILE).platform is Platform.MOBILE


def test_random_user_agent_uses_uniform_choice():
    """Test the picker delegates to random.choice over the whole pool."""
    with patch(
        "markharvest.core.harvesting.user_agents.random.choice",
        return_value=UserAgent.IOS_SAFARI,
    ) as mock_choice:
        agent = random_user_agent()

    assert agent is UserAgent.IOS_SAFARI
    mock_choice.assert_called_once_with(list(UserAgent))
