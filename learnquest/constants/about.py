"""Static metadata describing LearnQuest."""

APP_NAME = "LearnQuest"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "LearnQuest runs timed multiple-choice quizzes for students, awards "
    "experience points for correct answers and keeps a ranked leaderboard."
)
