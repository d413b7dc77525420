"""Daily run engine: tracker protocol, stages and orchestration."""
