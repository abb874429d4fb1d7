from typing import Optional


class ScanError(Exception):
    pass


class ConnectorError(ScanError):
    status_code: Optional[int]

    def __init__(self, *args, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(*args)


class MergeHashUnavailable(ConnectorError):
    number: int

    def __init__(self, *args, number: int, **kwargs):
        self.number = number
        super().__init__(*args, **kwargs)


class CriterionError(ScanError):
    head_name: str

    def __init__(self, *args, head_name: str):
        self.head_name = head_name
        super().__init__(*args)


class CollectorStateError(ScanError):
    pass
