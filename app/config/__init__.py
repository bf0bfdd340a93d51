# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, root URLconf and the WSGI application for the messaging backend.
# =============================================================================
