"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계좌, 원장, 순자산, 카테고리
- transactions: 거래, split
- undo: undo/redo
"""
