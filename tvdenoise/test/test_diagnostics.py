import pytest

from tvdenoise import diagnostics


class TestSet:
    def test_itstat(self):
        its = diagnostics.IterationStats({"Iter": "%d", "Obj Val": "%8.2e"})
        its.insert((0, 1.5))
        its.insert((1, 1e2))
        assert its.history()[0].Iter == 0
        assert its.history()[1].Iter == 1
        assert its.history()[1].Obj_Val == 1e2
        assert its.history(transpose=True).Obj_Val == [1.5, 100.0]

    def test_itstat_empty(self):
        its = diagnostics.IterationStats({"Iter": "%d", "Obj Val": "%8.2e"})
        assert its.history() == []
        assert its.history(transpose=True).Iter == []

    def test_ident(self):
        its = diagnostics.IterationStats({"Rel Chng": "%9.3e"}, ident={"Rel Chng": "change"})
        its.insert((0.5,))
        assert its.history()[0].change == 0.5

    def test_display(self, capsys):
        its = diagnostics.IterationStats({"Iter": "%d"}, display=True, period=2)
        its.insert((0,))
        cap = capsys.readouterr()
        assert cap.out == "Iter\n----\n   0\n"
        its.insert((1,))
        cap = capsys.readouterr()
        assert cap.out == ""
        its.insert((2,))
        cap = capsys.readouterr()
        assert cap.out == "   2\n"

    def test_no_display(self, capsys):
        its = diagnostics.IterationStats({"Iter": "%d"})
        its.insert((0,))
        assert capsys.readouterr().out == ""

    def test_exception(self):
        with pytest.raises(TypeError):
            diagnostics.IterationStats(["Iter", "%z4d"], display=False)
        with pytest.raises(ValueError):
            diagnostics.IterationStats({"Iter": "%z4d"}, display=False)

    def test_warning(self):
        with pytest.warns(UserWarning):
            diagnostics.IterationStats({"Iter": "%4e"}, display=False)
