"""Read-only inventory catalogue: query engine, sampler and client composer."""
