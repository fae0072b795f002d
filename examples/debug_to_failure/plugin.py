"""Plugin registering extra cases; enable with REPLAYTEST_PLUGINS=plugin."""


def register(harness):
    @harness.add("plugin - expected failure")
    def expected_failure(t):
        t.expect_fail()
        t.length([1, 2], 3)
