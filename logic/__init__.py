"""logic — Economy systems package.

Top-level modules
-----------------
ledger      — currency, owned counts, lifetime income + snapshot save/restore
costs       — purchase price, unlock chain, purchase / portal click
production  — per-unit countdowns, income credit
formation   — rings of automatons around the portal
feedback    — fixed pool of orbs flying back to the portal
interface   — read-only snapshots + HUD text for the presentation layer
tick        — world setup + per-frame system orchestrator
"""
