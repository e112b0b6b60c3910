"""
Chirp Backend — Services Layer
===============================

Service Inventory:
    - TokenCodec:     signs and verifies bearer tokens (PyJWT)
    - AuthService:    signup/login, bcrypt password hashing
    - UserService:    user rows and the Profile.user / Tweet.author lookups
    - ProfileService: profile create/update and User.profile
    - TweetService:   tweet listing/creation and User.tweets

Services take the request's AsyncSession as an argument and keep no
per-request state, so each is a module-level singleton.
"""
