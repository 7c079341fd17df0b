class SuiteError(Exception):
    def __init__(self, exit_code: int = 1, *args: object) -> None:
        super().__init__("one or more tasks failed", *args)
        self.exit_code = exit_code


class DashboardError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
