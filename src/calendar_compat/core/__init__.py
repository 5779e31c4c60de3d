"""Process plumbing shared by the bridge: hook bus, logging, tracing, throttling."""
