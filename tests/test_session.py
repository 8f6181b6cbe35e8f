"""Frame-level tests for AssessmentSession using synthetic side-view poses."""

import numpy as np
import pytest

from lumbar_analyzer import AssessmentSession
from lumbar_analyzer.analysis.stability import StabilityGrade
from lumbar_analyzer.evaluation import metrics as m
from lumbar_analyzer.evaluation.status import MetricStatus

FRAME_MS = 1000.0 / 30.0


def _run(session, poses):
    result = None
    for i, pose in enumerate(poses):
        result = session.process_frame(pose, i * FRAME_MS)
    return result


def _sweep(n_frames: int, start: int, end: int, amplitude: float) -> np.ndarray:
    series = np.zeros(n_frames)
    series[start:end + 1] = np.linspace(0.0, amplitude, end - start + 1)
    series[end + 1:] = amplitude
    return series


# =====================================================================
# Single frames
# =====================================================================

class TestSingleFrame:
    def test_no_person_returns_waiting_metrics(self):
        session = AssessmentSession("standingHipFlex")
        result = session.process_frame(None, 0.0)
        assert not result.has_pose
        assert result.stability is None
        assert [x.key for x in result.metrics] == [
            m.STABILITY_SCORE, m.EXCESSIVE_MOVEMENT, m.LUMBAR_ANGLE, m.HIP_FLEXION,
        ]
        assert all(x.description == m.WAITING_DESCRIPTION for x in result.metrics)
        assert session.last_result is result

    def test_empty_landmark_list_is_treated_as_no_person(self):
        result = AssessmentSession("rockBack").process_frame([], 0.0)
        assert m.HIP_KNEE_ANGLE in [x.key for x in result.metrics]

    def test_hidden_shoulders_give_empty_result(self, pose_factory):
        pose = pose_factory()
        pose[11:13, 3] = 0.1
        session = AssessmentSession()
        result = session.process_frame(pose, 0.0)
        assert not result.has_pose
        assert result.metrics == []
        assert len(session.stability) == 0

    def test_upright_standing_frame(self, pose_factory):
        result = AssessmentSession("standingHipFlex").process_frame(pose_factory(), 0.0)
        assert result.raw_lumbar_angle == 0.0
        assert result.lumbar_angle == 0.0
        assert result.hip_angle == pytest.approx(0.0, abs=1e-6)
        assert [x.key for x in result.metrics] == [
            m.STABILITY_SCORE, m.EXCESSIVE_MOVEMENT, m.LUMBAR_ANGLE, m.HIP_FLEXION, m.OVERALL_SCORE,
        ]
        by_key = {x.key: x for x in result.metrics}
        assert by_key[m.LUMBAR_ANGLE].status == MetricStatus.NORMAL
        assert by_key[m.HIP_FLEXION].status == MetricStatus.NORMAL

    def test_seated_frame_reports_alignment_instead_of_lumbar_angle(self, pose_factory):
        result = AssessmentSession("seatedKneeExt").process_frame(pose_factory(thigh_deg=90.0), 0.0)
        keys = [x.key for x in result.metrics]
        assert m.LUMBAR_ANGLE not in keys
        assert keys[-2:] == [m.LUMBAR_ALIGNMENT, m.OVERALL_SCORE]
        assert result.lumbar_angle == 0.0

    def test_rock_back_frame_reports_hip_knee_angle(self, pose_factory):
        # Camera to the side: the thigh points along +x in the image, shank hangs down
        pose = pose_factory()
        pose[23:25, :2] = (0.5, 0.6)
        pose[25:27, :2] = (0.7, 0.6)
        pose[27:29, :2] = (0.7, 0.8)
        result = AssessmentSession("rockBack").process_frame(pose, 0.0)
        by_key = {x.key: x for x in result.metrics}
        assert by_key[m.HIP_KNEE_ANGLE].value == pytest.approx(90.0, abs=0.5)
        assert by_key[m.HIP_KNEE_ANGLE].status == MetricStatus.CAUTION

    def test_hidden_knees_skip_stability_sample_and_test_metric(self, pose_factory):
        pose = pose_factory(lean_deg=20.0)
        pose[25:27, 3] = 0.0
        session = AssessmentSession("standingHipFlex")
        result = session.process_frame(pose, 0.0)
        assert result.lumbar_angle == pytest.approx(16.0, abs=1e-6)
        assert result.hip_angle is None
        assert len(session.stability) == 0
        assert m.HIP_FLEXION not in [x.key for x in result.metrics]

    def test_partial_landmark_list_is_rejected(self):
        with pytest.raises(ValueError):
            AssessmentSession().process_frame(np.zeros((10, 4)), 0.0)

    @pytest.mark.parametrize("bad", [5, 3.2, object()])
    def test_non_sequence_landmarks_are_rejected(self, bad):
        with pytest.raises(ValueError):
            AssessmentSession().process_frame(bad, 0.0)

    def test_unknown_test_type(self):
        with pytest.raises(ValueError):
            AssessmentSession("plank")


# =====================================================================
# Sequences
# =====================================================================

class TestSequences:
    def test_stable_trunk_during_hip_sweep_is_excellent(self, pose_factory):
        thigh = _sweep(150, 10, 40, 80.0)
        session = AssessmentSession("standingHipFlex")
        result = _run(session, [pose_factory(thigh_deg=t) for t in thigh])

        s = result.stability
        assert len(s.hip_movement_phases) == 1
        assert s.hip_movement_phases[0].hip_range == pytest.approx(80.0, abs=1e-6)
        assert s.stability_grade == StabilityGrade.EXCELLENT
        assert s.lumbar_excessive_movement == 0.0

    def test_trunk_following_hip_lowers_score(self, pose_factory):
        lean = _sweep(150, 10, 40, 30.0)
        thigh = _sweep(150, 10, 40, 60.0)
        session = AssessmentSession("standingHipFlex")
        result = _run(session, [pose_factory(lean_deg=a, thigh_deg=t) for a, t in zip(lean, thigh)])

        s = result.stability
        assert len(s.hip_movement_phases) == 1
        assert 50.0 < s.lumbar_stability_score < 95.0
        assert s.hip_lumbar_ratio > 0.1

    def test_lumbar_angle_is_smoothed(self, pose_factory):
        session = AssessmentSession()
        session.process_frame(pose_factory(lean_deg=0.0), 0.0)
        result = session.process_frame(pose_factory(lean_deg=-20.0), FRAME_MS)
        assert result.raw_lumbar_angle == pytest.approx(-20.0, abs=1e-6)
        assert result.lumbar_angle == pytest.approx(0.7 * -20.0, abs=1e-6)

    def test_window_is_bounded(self, pose_factory):
        session = AssessmentSession()
        _run(session, [pose_factory()] * 200)
        assert len(session.stability) == session.config.stability.window_size


# =====================================================================
# Lifecycle
# =====================================================================

class TestLifecycle:
    def test_changing_test_type_resets_history(self, pose_factory):
        session = AssessmentSession("standingHipFlex")
        _run(session, [pose_factory()] * 20)

        session.set_test_type("standingHipFlex")
        assert len(session.stability) == 20

        session.set_test_type("rockBack")
        assert session.test_type == "rockBack"
        assert len(session.stability) == 0
        assert len(session.angle_filter) == 0

        with pytest.raises(ValueError):
            session.set_test_type("plank")

    def test_recording_and_reset(self, pose_factory):
        session = AssessmentSession()
        session.start_recording(0.0)
        _run(session, [pose_factory()] * 20)
        session.stop_recording()
        session.process_frame(pose_factory(), 5000.0)

        assert len(session.recorder.points) == 20
        assert session.recorder.duration_s == pytest.approx(19 * FRAME_MS / 1000.0)

        session.reset()
        assert len(session.recorder.points) == 0
        assert len(session.stability) == 0
        assert len(session.angle_filter) == 0
        assert session.last_result is None

    def test_frames_without_knees_are_not_recorded(self, pose_factory):
        hidden = pose_factory()
        hidden[25:27, 3] = 0.0
        session = AssessmentSession()
        session.start_recording(0.0)
        _run(session, [pose_factory()] * 5 + [hidden] * 5)
        assert len(session.recorder.points) == 5
        assert len(session.stability) == 5
