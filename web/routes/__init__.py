"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- journal: 분개 입력/조회/승인/역분개
- ledger: 원장, 8열 정산표
- centralization: IVA 집계 분개
- chart: 계정과목표
"""
