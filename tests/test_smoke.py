"""Smoke test to verify the toolchain works."""


def test_import_venue_flow():
    """Verify the venue_flow package can be imported."""
    import venue_flow

    assert venue_flow.__version__ == "0.1.0"


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import venue_flow.config
    import venue_flow.data
    import venue_flow.overlay.renderer
    import venue_flow.playback.session
    import venue_flow.web.app

    assert venue_flow.data is not None
    assert venue_flow.config is not None
    assert venue_flow.overlay.renderer is not None
    assert venue_flow.playback.session is not None
    assert venue_flow.web.app is not None
