from .base import Base

from .participant import Participant
from .video import Video, VideoStatus
from .evaluation import Judge, Evaluation
from .contest_setting import ContestSetting, SettingKey
