import os
import sys
from datetime import datetime


def _debug_enabled() -> bool:
    return os.environ.get('IMAGEMETA_DEBUG', '0').lower() in ('1', 'true')


def write_log(message: str, level: str = "INFO", echo: bool = True) -> None:
    """로그 메시지를 파일과 콘솔에 기록합니다."""
    log_file = os.environ.get('LOG_FILE')

    if log_file:
        timestamp = datetime.now().isoformat()
        log_message = f"[{timestamp}] {level} {message}"

        with open(log_file, 'a', encoding='utf-8') as f:
            f.write(log_message + "\n")

    if not echo:
        return

    # TRACE는 디버그 모드에서만 stderr로 출력
    if level != "TRACE" or _debug_enabled():
        print(message, file=sys.stderr)


def trace(message: str) -> None:
    """추적 로그를 기록합니다."""
    write_log(message, "TRACE")


def error(message: str, echo: bool = True) -> None:
    """오류 로그를 기록합니다. 사용자에게 이미 보고한 오류는 echo=False로 파일에만 남깁니다."""
    write_log(message, "ERROR", echo)
