# pricewatch/ui/routes.py

"""Route table and access guards for the dashboard screens."""

HOME = "/"
LOGIN = "/login"
REGISTER = "/register"
DASHBOARD = "/dashboard"

PUBLIC_ONLY_ROUTES: frozenset[str] = frozenset({LOGIN, REGISTER})
PROTECTED_ROUTES: frozenset[str] = frozenset({DASHBOARD})
ALL_ROUTES: frozenset[str] = frozenset({HOME}) | PUBLIC_ONLY_ROUTES | PROTECTED_ROUTES


def resolve_route(requested: str, authenticated: bool) -> str:
    """Return the route that should actually be shown.

    Signed-in users skip the login/register forms; anonymous users
    asking for a protected route land on the login form. Unknown
    routes fall back to the home route.
    """
    if requested not in ALL_ROUTES:
        return HOME
    if requested in PROTECTED_ROUTES and not authenticated:
        return LOGIN
    if requested in PUBLIC_ONLY_ROUTES and authenticated:
        return DASHBOARD
    return requested
