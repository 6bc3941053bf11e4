"""Tests for Dispatcher."""

from broker.services.dispatcher import DispatchCondition, Dispatcher
from tests.fakes import GROUP_1, GROUP_2


class TestDispatch:
    """SUT: Dispatcher.dispatch"""

    async def test_sends_template_to_every_destination(self, transport):
        """Every destination receives the inquiry template."""
        report = await Dispatcher(transport).dispatch("LAPTOP", "need laptop", [GROUP_1, GROUP_2])

        assert report.condition == DispatchCondition.OK
        assert report.success_count == 2
        assert transport.texts_to(GROUP_1) == [
            "I am looking for : need laptop if you have Reply Privately"
        ]

    async def test_partial_failure_counts_each_destination(self, transport):
        """One failing destination does not stop the others."""
        transport.failing.add(GROUP_1)

        report = await Dispatcher(transport).dispatch("LAPTOP", "need laptop", [GROUP_1, GROUP_2])

        assert (report.success_count, report.total) == (1, 2)
        assert report.condition == DispatchCondition.PARTIAL_FAILURE
        assert report.failed == [GROUP_1]
        assert GROUP_1 in report.errors
        assert not report.nothing_delivered

    async def test_total_failure(self, transport):
        """No delivered destination is a total failure."""
        transport.failing.update({GROUP_1, GROUP_2})
        report = await Dispatcher(transport).dispatch("LAPTOP", "x", [GROUP_1, GROUP_2])
        assert report.condition == DispatchCondition.TOTAL_FAILURE
        assert report.nothing_delivered

    async def test_no_destinations(self, transport):
        """A topic without destinations sends nothing and does not raise."""
        report = await Dispatcher(transport).dispatch("MOUSE", "x", [])
        assert report.condition == DispatchCondition.NO_DESTINATIONS
        assert report.total == 0
        assert transport.texts == []
