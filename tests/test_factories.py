import asyncio

from gaze_calib.acquisition import DummySampler, ZMQSampler
from gaze_calib.configs import AppSettings
from gaze_calib.factories import create_runner, create_sampler, create_session
from gaze_calib.ui import ConsoleView


def test_create_sampler_by_kind():
    settings = AppSettings(_env_file=None)
    settings.sampler.kind = "dummy"
    assert isinstance(create_sampler(settings), DummySampler)

    settings.sampler.kind = "zmq"
    sampler = create_sampler(settings)
    assert isinstance(sampler, ZMQSampler)
    assert sampler.endpoint == settings.sampler.endpoint
    asyncio.run(sampler.close())


def test_create_session_uses_settings(clock):
    settings = AppSettings(_env_file=None)
    session = create_session(settings, clock)

    assert session.targets == tuple(settings.calibration.points_to_calibrate)


def test_create_runner_report_dir(tmp_path):
    settings = AppSettings(_env_file=None, data_dir=tmp_path)
    settings.sampler.kind = "dummy"

    runner = create_runner(settings, ConsoleView())
    assert runner.report_path == tmp_path / "calibration_result.json"

    settings.save_calibration = False
    assert create_runner(settings, ConsoleView()).report_path is None
