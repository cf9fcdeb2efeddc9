"""InfraKB: infrastructure architecture knowledge base."""
