#!/usr/bin/env python3
"""
반려동물 장소 수동 수집 도구

프로젝트 루트에서 실행하여 통합 조회 파이프라인을 API 서버 없이 실행합니다.

  python run_manual_batch.py pet-places --region 6          # 전체 키워드 수집 + 병합
  python run_manual_batch.py search 오르디 --mode pet        # 단일 키워드 조회
  python run_manual_batch.py match-rate --region 6          # 키워드 일치율
"""

import argparse
import asyncio
import json
import logging
import sys

from app.collectors.tour_api_client import TourAPIClient
from app.core.logger import setup_logging
from app.services.pet_place_aggregator import (
    AggregationRequest,
    SourceStatus,
    TourMode,
    create_aggregator,
)
from config.constants import DEFAULT_REGION

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="반려동물 장소 수동 수집")
    parser.add_argument("--verbose", "-v", action="store_true", help="상세 로그 출력")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pet_places = subparsers.add_parser("pet-places", help="전체 키워드 수집 + 병합")
    pet_places.add_argument("--region", default=DEFAULT_REGION, help="지역 코드")
    pet_places.add_argument("--sigungu", help="시군구 코드")
    pet_places.add_argument("--output", help="결과 JSON 저장 경로")

    search = subparsers.add_parser("search", help="단일 호출 조회")
    search.add_argument("keyword", nargs="?", default="", help="검색 키워드 (없으면 지역 목록)")
    search.add_argument("--region", default=DEFAULT_REGION, help="지역 코드")
    search.add_argument("--mode", choices=[m.value for m in TourMode], default=TourMode.PET.value)
    search.add_argument("--rows", default="10", help="페이지당 건수")
    search.add_argument("--page", default="1", help="페이지 번호")

    match_rate = subparsers.add_parser("match-rate", help="큐레이션 키워드 일치율")
    match_rate.add_argument("--region", default=DEFAULT_REGION, help="지역 코드")

    return parser


def build_request(args: argparse.Namespace) -> AggregationRequest:
    if args.command == "pet-places":
        return AggregationRequest(
            region=args.region,
            mode=TourMode.PET,
            load_all_keywords=True,
            sigungu_code=args.sigungu,
        )
    return AggregationRequest(
        region=args.region,
        rows_per_page=args.rows,
        page_no=args.page,
        keyword=args.keyword,
        mode=TourMode(args.mode),
    )


async def run(args: argparse.Namespace) -> int:
    async with TourAPIClient() as client:
        aggregator = create_aggregator(client)

        if args.command == "match-rate":
            report = await aggregator.compute_match_rate(args.region)
            print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
            return 0 if report.success else 1

        result = await aggregator.aggregate(build_request(args))
        payload = result.to_dict()

    if getattr(args, "output", None):
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        logger.info(f"결과 저장: {args.output}")
    else:
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    failed = SourceStatus.FAILED in (result.tourism_status, result.pet_tourism_status)
    return 1 if failed else 0


def main() -> None:
    args = build_parser().parse_args()
    setup_logging()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
