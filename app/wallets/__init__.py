"""
Wallets app for balances, approvals and escrow-backed orders.

This app handles:
- Per-user wallet balances and their audit entries
- Loads, payouts and peer transfers with admin approval
- Goods orders paid through paired escrow holds
- Tracking verification and scheduled seller release
"""
