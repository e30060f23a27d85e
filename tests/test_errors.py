from thumbnailer.core.errors import InvalidGeometry, RenderFailure, ResourceLoadFailure, ThumbnailerError


def test_context_and_str():
    err = ResourceLoadFailure("image file not found", number=3, path="frames/03.png", stage="load")
    assert isinstance(err, ThumbnailerError)
    assert err.context() == {"seq": 3, "path": "frames/03.png", "stage": "load"}
    assert str(err) == "image file not found (seq=3 path=frames/03.png stage=load)"


def test_plain_message():
    err = ThumbnailerError("boom")
    assert err.context() == {}
    assert str(err) == "boom"


def test_invalid_geometry_is_a_render_failure():
    assert issubclass(InvalidGeometry, RenderFailure)
