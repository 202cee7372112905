"""
습관 타입·집계 관련 상수.
완료 규칙(Completion Rules)과 집계(Aggregator)가 공유하는 값들을 한 곳에서 관리한다.
"""
import enum


class HabitType(str, enum.Enum):
    CHECKBOX = "checkbox"
    DURATION = "duration"
    RATING = "rating"


# 카테고리 미입력 시 기본값
DEFAULT_CATEGORY = "Uncategorized"

# 같은 카테고리 내 타입 정렬 순서(일별 화면 기준). HABIT_TYPE_ORDER 설정으로 변경 가능
DEFAULT_HABIT_TYPE_ORDER: tuple[str, ...] = ("checkbox", "duration", "rating")

# 평점(rating) 범위와 입력 단위
RATING_MIN = 0.0
RATING_MAX = 5.0
RATING_STEP = 0.5

# 평균 평점 반올림 자릿수
RATING_AVERAGE_DECIMALS = 1

# 추이(trend) 조회에 허용되는 기간(개월)
TREND_WINDOW_MONTHS = (6, 12)

# duration 입력 상한(분) — 하루 24시간
DURATION_MAX_MINUTES = 24 * 60

# 통계 조회에 허용되는 연도 범위
YEAR_MIN = 1
YEAR_MAX = 9999
