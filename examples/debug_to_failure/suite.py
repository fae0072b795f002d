"""Example suite: one passing group, one failing case to replay.

    replaytest run examples/debug_to_failure/suite.py:harness
    replaytest debug examples/debug_to_failure/suite.py:harness --name "strings - upper" --offset 0
"""
import asyncio

from replaytest import Harness

harness = Harness()


@harness.add("math - addition")
def addition(t):
    t.equal(1 + 1, 2)
    t.not_equal(1 + 1, 3)


@harness.add("strings - upper")
def upper(t):
    t.equal("abc".upper(), "ABC")
    t.equal("abc".title(), "ABC", "title() only capitalizes the first letter")


@harness.add_async("timers - call later")
def call_later(t, done):
    def fire():
        t.is_true(True)
        done()

    asyncio.get_running_loop().call_later(0.01, fire)
