import importlib
import importlib.util


def test_manager_importable():
    from ResistiveTouch.core.manager import TouchManager
    assert callable(TouchManager)


def test_eval_entry():
    from ResistiveTouch.analysis.eval_csv import main
    assert callable(main)


def test_run_module_entry():
    spec = importlib.util.find_spec("ResistiveTouch.analysis.eval_csv")
    assert spec is not None, "analysis.eval_csv module should be discoverable"
