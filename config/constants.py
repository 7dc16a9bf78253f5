"""
상수 정의 모듈

애플리케이션에서 사용하는 상수들을 정의합니다.
"""

from enum import Enum


class TourService(Enum):
    """관광 API 서비스 구분"""

    GENERAL = "general"  # 국문 관광정보 서비스
    PET = "pet"  # 반려동물 동반여행 서비스


class EndpointKind(Enum):
    """관광 API 조회 방식"""

    AREA_LIST = "area_list"  # 지역 기반 목록
    KEYWORD_SEARCH = "keyword_search"  # 키워드 검색


# 서비스/조회 방식별 오퍼레이션명
TOUR_ENDPOINTS = {
    (TourService.GENERAL, EndpointKind.AREA_LIST): "areaBasedList2",
    (TourService.GENERAL, EndpointKind.KEYWORD_SEARCH): "searchKeyword2",
    (TourService.PET, EndpointKind.AREA_LIST): "areaBasedList",
    (TourService.PET, EndpointKind.KEYWORD_SEARCH): "searchKeyword",
}

# 정상 응답 코드
SUCCESS_RESULT_CODES = ("0000", "00", "0")

# HTTP 200으로 내려오는 서비스 오류 표식
SERVICE_ERROR_MARKERS = (
    "OpenAPI_ServiceResponse",
    "SERVICE ERROR",
    "<errMsg>",
    "SERVICE_KEY_IS_NOT_REGISTERED_ERROR",
    "INVALID_REQUEST_PARAMETER_ERROR",
    "LIMITED_NUMBER_OF_SERVICE_REQUESTS_EXCEEDS_ERROR",
    "SERVICE_ACCESS_DENIED_ERROR",
    "TEMPORARILY_DISABLE_THE_SERVICEKEY_ERROR",
)


# 지역 코드 매핑
AREA_CODES = {
    "서울": "1",
    "인천": "2",
    "대전": "3",
    "대구": "4",
    "광주": "5",
    "부산": "6",
    "울산": "7",
    "세종": "8",
    "경기": "31",
    "강원": "32",
    "충북": "33",
    "충남": "34",
    "경북": "35",
    "경남": "36",
    "전북": "37",
    "전남": "38",
    "제주": "39",
}

DEFAULT_REGION = AREA_CODES["부산"]

# 반려동물 동반 가능 장소 키워드 (부산)
PET_FRIENDLY_KEYWORDS = [
    "롯데프리미엄아울렛 동부산점", "몽작", "부산시민공원", "센텀 APEC나루공원",
    "신호공원", "오르디", "온천천시민공원", "칠암만장", "카페 만디", "포레스트3002",
    "홍법사(부산)", "감나무집", "광안리해변 테마거리", "광안리해수욕장", "구덕포끝집고기",
    "구포시장", "국립부산과학관", "그림하우스", "금강사(부산)", "다대포 꿈의 낙조분수",
    "다대포해수욕장", "대보름", "대저생태공원", "대저수문 생태공원", "더웨이브",
    "더펫텔프리미엄스위트", "덕미", "듀스포레", "드림서프라운지", "만달리",
    "맥도생태공원", "모닝듀 게스트 하우스(모닝듀)", "무명일기", "문탠로드", "민락수변공원",
    "밀락더마켓", "부산 감천문화마을", "부산 송도해상케이블카", "부산 송도해수욕장",
    "부산 암남공원", "부산 자갈치시장", "부산 태종대", "부산어촌민속관", "비프앤리프",
    "사직야구장", "서면", "성지곡수원지", "송도용궁구름다리", "송도해수욕장", "수변공원",
    "신세계센텀시티", "심심", "아미산전망대", "암남공원", "엘시티", "오션뷰펜션부산",
    "온천천", "용두산공원", "용미리", "원효대사 설법바위", "유엔기념공원", "을숙도생태공원",
    "을숙도철새공원", "이기대공원", "이기대도시자연공원", "임시야구장", "자갈치시장",
    "자갈치시장(관광특구)", "전포카페거리", "정관신도시", "조방원", "진해군항제",
    "차이나타운(부산)", "천마산공원", "초량이바구길", "컨벤션센터(벡스코)", "태종대",
    "파인트리", "팔레드시즈", "포차거리", "피씨방", "하단", "해동용궁사", "해운대",
    "해운대구청", "해운대백병원", "해운대해수욕장", "회동수원지", "황령산", "형제가든",
    "홍법사", "화명생태공원", "화명신도시", "낙동강", "다대포", "동래", "부산진", "사상",
    "사하", "서구", "수영", "연제", "영도", "중구", "기장",
]
