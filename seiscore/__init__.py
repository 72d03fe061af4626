"""
SEI credit score: heuristic creditworthiness scoring for SEI wallets.

Fetches public wallet facts (account age, transaction history, balances,
staking delegations) from explorer, Cosmos REST and EVM JSON-RPC providers,
then folds them into a 0-1000 score with a letter grade and risk tier.
"""

__version__ = "0.1.0"
