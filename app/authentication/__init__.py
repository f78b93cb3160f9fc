"""
Accounts application.

Email-identified users and the profile that carries each user's public
@handle. Handles address peer transfers and order sellers; staff users
act as wallet administrators.

Usage:
    from authentication.models import User, Profile
"""
