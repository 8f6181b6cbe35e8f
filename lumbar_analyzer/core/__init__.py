from .landmarks import Landmark, parse_landmarks, landmarks_from_array, is_visible
from .smoother import AngleFilter
