"""MediaPipe BlazePose landmark definitions and assessment test types."""

# BlazePose 33 landmarks
POSE_LANDMARKS = {
    0: "nose",
    1: "left_eye_inner",
    2: "left_eye",
    3: "left_eye_outer",
    4: "right_eye_inner",
    5: "right_eye",
    6: "right_eye_outer",
    7: "left_ear",
    8: "right_ear",
    9: "mouth_left",
    10: "mouth_right",
    11: "left_shoulder",
    12: "right_shoulder",
    13: "left_elbow",
    14: "right_elbow",
    15: "left_wrist",
    16: "right_wrist",
    17: "left_pinky",
    18: "right_pinky",
    19: "left_index",
    20: "right_index",
    21: "left_thumb",
    22: "right_thumb",
    23: "left_hip",
    24: "right_hip",
    25: "left_knee",
    26: "right_knee",
    27: "left_ankle",
    28: "right_ankle",
    29: "left_heel",
    30: "right_heel",
    31: "left_foot_index",
    32: "right_foot_index",
}

# Reverse mapping
LANDMARK_NAMES = {v: k for k, v in POSE_LANDMARKS.items()}

NUM_LANDMARKS = len(POSE_LANDMARKS)

# Bilateral pairs averaged into midpoints
SHOULDER_PAIR = (LANDMARK_NAMES["left_shoulder"], LANDMARK_NAMES["right_shoulder"])
HIP_PAIR = (LANDMARK_NAMES["left_hip"], LANDMARK_NAMES["right_hip"])
KNEE_PAIR = (LANDMARK_NAMES["left_knee"], LANDMARK_NAMES["right_knee"])
ANKLE_PAIR = (LANDMARK_NAMES["left_ankle"], LANDMARK_NAMES["right_ankle"])


# Assessment test types
TEST_STANDING_HIP_FLEX = "standingHipFlex"
TEST_ROCK_BACK = "rockBack"
TEST_SEATED_KNEE_EXT = "seatedKneeExt"

TEST_TYPES = (TEST_STANDING_HIP_FLEX, TEST_ROCK_BACK, TEST_SEATED_KNEE_EXT)

TEST_LABELS = {
    TEST_STANDING_HIP_FLEX: "Standing hip flexion test",
    TEST_ROCK_BACK: "Rock-back test",
    TEST_SEATED_KNEE_EXT: "Seated knee extension test",
}

# Landmark pairs that must be visible before each test's specific metric is computed
TEST_REQUIRED_PAIRS = {
    TEST_STANDING_HIP_FLEX: (SHOULDER_PAIR, HIP_PAIR, KNEE_PAIR),
    TEST_ROCK_BACK: (SHOULDER_PAIR, HIP_PAIR, KNEE_PAIR, ANKLE_PAIR),
    TEST_SEATED_KNEE_EXT: (SHOULDER_PAIR, HIP_PAIR, KNEE_PAIR, ANKLE_PAIR),
}


def validate_test_type(test_type: str) -> str:
    """Return *test_type* unchanged, or raise ValueError if it is unknown."""
    if test_type not in TEST_TYPES:
        raise ValueError(
            f"Unknown test type: {test_type!r} (expected one of {', '.join(TEST_TYPES)})"
        )
    return test_type
