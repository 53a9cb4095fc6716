from rest_framework_simplejwt.tokens import RefreshToken


def role_refresh_token(user) -> RefreshToken:
    """
    Refresh token with the role claims copied onto it. Access tokens derived from it inherit them,
    so the client can route customers and owners without another request.
    """
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    refresh["is_owner"] = user.is_owner
    return refresh


def issue_token_pair(user) -> dict:
    refresh = role_refresh_token(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}
