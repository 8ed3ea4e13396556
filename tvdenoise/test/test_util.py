import time

from tvdenoise.util import Timer, device_info


def test_timer():
    t = Timer()
    assert t.elapsed() == 0.0
    t.start()
    time.sleep(0.01)
    t.stop()
    t0 = t.elapsed()
    assert t0 > 0.0
    assert t.elapsed(total=False) == 0.0
    t.start()
    time.sleep(0.01)
    t.stop()
    assert t.elapsed() > t0
    assert str(t).endswith(" s")
    t.reset()
    assert t.elapsed() == 0.0


def test_device_info():
    assert isinstance(device_info(), str)
