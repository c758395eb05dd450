"""monoledger: branch-scoped change ledger and bump resolution for monorepos."""
