"""
LineIO 설정 관리 모듈

이 모듈은 LineIO의 모든 설정을 중앙 집중식으로 관리합니다.
- 시리얼 통신 설정
- 라인 프레임(시작/종료 문자, 읽기 단위) 설정
- 교환(request/response) 타임아웃 설정
- 로깅 설정
"""

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Union

from . import logger as logger_module
from .constants import Defaults


@dataclass
class SerialConfig:
    """
    시리얼 통신 설정 클래스

    Attributes:
        baudrate: 통신 속도 (bps)
        bytesize: 데이터 비트 수
        parity: 패리티 설정 ('N', 'E', 'O', 'M', 'S')
        stopbits: 스톱 비트 수
        handshake: 흐름 제어 ('none', 'xon_xoff', 'rts_cts', 'dsr_dtr')
        timeout: 읽기 타임아웃 (초), 스캔 스레드의 폴링 주기
        write_timeout: 쓰기 타임아웃 (초)
        rts: RTS 신호 설정
        dtr: DTR 신호 설정
    """
    baudrate: int = Defaults.Baudrate
    bytesize: int = Defaults.Bytesize
    parity: str = Defaults.Parity
    stopbits: Union[int, float] = Defaults.Stopbits
    handshake: str = Defaults.Handshake
    timeout: Optional[float] = Defaults.ReadTimeout
    write_timeout: Optional[float] = Defaults.WriteTimeout
    rts: Optional[bool] = None
    dtr: Optional[bool] = None

    def __post_init__(self):
        """설정값 유효성 검증"""
        if int(self.baudrate) <= 0:
            raise ValueError(f"지원하지 않는 통신 속도: {self.baudrate}")
        if self.bytesize not in [5, 6, 7, 8]:
            raise ValueError(f"지원하지 않는 데이터 비트: {self.bytesize}")
        if str(self.parity).upper() not in ['N', 'E', 'O', 'M', 'S']:
            raise ValueError(f"지원하지 않는 패리티: {self.parity}")
        if self.stopbits not in [1, 1.5, 2]:
            raise ValueError(f"지원하지 않는 스톱 비트: {self.stopbits}")
        if str(self.handshake).lower() not in ['none', 'xon_xoff', 'rts_cts', 'dsr_dtr']:
            raise ValueError(f"지원하지 않는 흐름 제어: {self.handshake}")


@dataclass
class FrameConfig:
    """
    라인 프레임 설정 클래스

    Attributes:
        end_marker: 라인 종료 문자 (필수)
        start_marker: 라인 시작 문자 (None이면 자동 시작 모드)
        chunk_size: 한 번에 읽을 최대 바이트 수 (라인 길이와 무관)
        encoding: 스트림 문자 인코딩
    """
    end_marker: str = Defaults.EndMarker
    start_marker: Optional[str] = Defaults.StartMarker
    chunk_size: int = Defaults.ChunkSize
    encoding: str = Defaults.Encoding

    def __post_init__(self):
        """설정값 유효성 검증"""
        if not isinstance(self.end_marker, str) or len(self.end_marker) != 1:
            raise ValueError(f"종료 문자는 한 글자여야 합니다: {self.end_marker!r}")
        if self.start_marker is not None:
            if not isinstance(self.start_marker, str) or len(self.start_marker) != 1:
                raise ValueError(f"시작 문자는 한 글자여야 합니다: {self.start_marker!r}")
            if self.start_marker == self.end_marker:
                raise ValueError(f"시작 문자와 종료 문자가 같을 수 없습니다: {self.end_marker!r}")
        if int(self.chunk_size) < 1:
            raise ValueError(f"읽기 단위는 1 이상이어야 합니다: {self.chunk_size}")


@dataclass
class ExchangeConfig:
    """
    교환(request/response) 설정 클래스

    Attributes:
        timeout_ms: 교환 타임아웃 (밀리초), 큐에 들어간 시점부터 계산
        join_timeout: 종료 시 스캔 스레드를 기다리는 최대 시간 (초)
    """
    timeout_ms: int = int(Defaults.ExchangeTimeout * 1000)
    join_timeout: float = Defaults.JoinTimeout

    def __post_init__(self):
        """설정값 유효성 검증"""
        if self.timeout_ms <= 0:
            raise ValueError(f"교환 타임아웃은 0보다 커야 합니다: {self.timeout_ms}")
        if self.join_timeout < 0:
            raise ValueError(f"스레드 대기 시간은 0 이상이어야 합니다: {self.join_timeout}")

    @property
    def timeout(self) -> float:
        """타임아웃 (초)"""
        return self.timeout_ms / 1000.0


@dataclass
class LoggingConfig:
    """
    로깅 설정 클래스

    Attributes:
        module_name: 로거 모듈 이름
        log_file: 로그 파일 경로
        log_level: 로깅 레벨
        backup_days: 백업 보관 일수
        enable_console: 콘솔 출력 활성화 여부
        enable_file: 파일 출력 활성화 여부
    """
    module_name: str = Defaults.LoggerName
    log_file: str = "log/lineio.log"
    log_level: str = "DEBUG"
    backup_days: int = 7
    enable_console: bool = True
    enable_file: bool = False


class LineIOConfig:
    """
    LineIO 통합 설정 관리 클래스

    모든 설정을 중앙에서 관리하고 환경별 설정을 제공합니다.
    적용 순서: 기본값 -> 환경별 설정 -> 설정 파일(JSON) -> 환경 변수
    """

    def __init__(self,
                 config_file: Optional[str] = None,
                 environment: str = "development"):
        """
        설정 초기화

        Args:
            config_file: 설정 파일 경로 (선택사항, JSON)
            environment: 실행 환경 (development, testing, production)
        """
        self.environment = environment
        self.config_file = config_file

        # 기본 설정 로드
        self._load_default_configs()

        # 환경별 설정 적용
        self._apply_environment_configs()

        # 설정 파일에서 로드 (있는 경우)
        if config_file and os.path.exists(config_file):
            self._load_from_file(config_file)

        # 환경 변수 설정 적용
        self._apply_environment_variables()

        # 로거 초기화
        self._logger = None

    def get_logger(self):
        """
        LineIO용 로거를 반환합니다.

        Returns:
            설정된 로거 인스턴스
        """
        if self._logger is None:
            self._logger = logger_module.setup_logger(
                name=self.logging.module_name,
                log_file=self.logging.log_file,
                level=self.logging.log_level,
                backup_days=self.logging.backup_days,
                enable_console=self.logging.enable_console,
                enable_file=self.logging.enable_file,
            )
        return self._logger

    def _load_default_configs(self) -> None:
        """
        기본 설정값들을 로드합니다.
        """
        self.serial = SerialConfig()
        self.frame = FrameConfig()
        self.exchange = ExchangeConfig()
        self.logging = LoggingConfig()

    def _apply_environment_configs(self) -> None:
        """
        환경별 특화 설정을 적용합니다.
        """
        if self.environment == "development":
            self._apply_development_config()
        elif self.environment == "testing":
            self._apply_testing_config()
        elif self.environment == "production":
            self._apply_production_config()

    def _apply_development_config(self) -> None:
        """
        개발 환경 설정을 적용합니다.
        """
        self.logging.log_level = "DEBUG"
        self.logging.enable_console = True

    def _apply_testing_config(self) -> None:
        """
        테스트 환경 설정을 적용합니다.
        """
        self.logging.log_level = "WARNING"
        self.logging.enable_console = False
        self.serial.timeout = 0.05  # 빠른 종료를 위한 짧은 폴링 주기

    def _apply_production_config(self) -> None:
        """
        운영 환경 설정을 적용합니다.
        """
        self.logging.log_level = "INFO"
        self.logging.enable_console = False
        self.logging.enable_file = True

    def _load_from_file(self, config_file: str) -> None:
        """
        JSON 설정 파일에서 설정을 로드합니다.

        파일 형식::

            {"serial": {"baudrate": 115200}, "frame": {"chunk_size": 32},
             "exchange": {"timeout_ms": 1000}, "logging": {"log_level": "INFO"}}

        Args:
            config_file: 설정 파일 경로
        """
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        sections = {
            "serial": SerialConfig,
            "frame": FrameConfig,
            "exchange": ExchangeConfig,
            "logging": LoggingConfig,
        }
        for section, klass in sections.items():
            values = data.get(section)
            if not isinstance(values, dict):
                continue
            known = {f.name for f in fields(klass)}
            unknown = set(values) - known
            if unknown:
                raise ValueError(f"알 수 없는 설정 항목 [{section}]: {sorted(unknown)}")
            current = getattr(self, section)
            merged = {f.name: getattr(current, f.name) for f in fields(klass)}
            merged.update(values)
            setattr(self, section, klass(**merged))

    def _apply_environment_variables(self) -> None:
        """
        환경 변수에서 설정값을 읽어와 적용합니다.
        """
        # 시리얼 설정
        if baudrate := os.getenv('LINEIO_BAUDRATE'):
            self.serial.baudrate = int(baudrate)
        if timeout := os.getenv('LINEIO_READ_TIMEOUT'):
            self.serial.timeout = float(timeout)

        # 프레임 설정
        if chunk_size := os.getenv('LINEIO_CHUNK_SIZE'):
            self.frame.chunk_size = int(chunk_size)

        # 교환 설정
        if exchange_timeout := os.getenv('LINEIO_EXCHANGE_TIMEOUT_MS'):
            self.exchange.timeout_ms = int(exchange_timeout)

        # 로깅 설정
        if log_level := os.getenv('LINEIO_LOG_LEVEL'):
            self.logging.log_level = log_level.upper()
        if log_file := os.getenv('LINEIO_LOG_FILE'):
            self.logging.log_file = log_file
            self.logging.enable_file = True

    def get_serial_config(self, **overrides) -> Dict[str, Any]:
        """
        시리얼 통신 설정을 반환합니다.

        Args:
            **overrides: 기본 설정을 오버라이드할 설정값들 (None은 무시)

        Returns:
            시리얼 통신 설정 딕셔너리
        """
        config = {
            'baudrate': self.serial.baudrate,
            'bytesize': self.serial.bytesize,
            'parity': self.serial.parity,
            'stopbits': self.serial.stopbits,
            'handshake': self.serial.handshake,
            'timeout': self.serial.timeout,
            'write_timeout': self.serial.write_timeout,
            'rts': self.serial.rts,
            'dtr': self.serial.dtr,
        }
        config.update({k: v for k, v in overrides.items() if v is not None})
        return config

    def get_frame_config(self, **overrides) -> FrameConfig:
        """
        라인 프레임 설정을 반환합니다.

        ``start_marker=None``을 명시하면 자동 시작 모드가 됩니다.

        Returns:
            검증된 FrameConfig 인스턴스
        """
        values = {
            'end_marker': self.frame.end_marker,
            'start_marker': self.frame.start_marker,
            'chunk_size': self.frame.chunk_size,
            'encoding': self.frame.encoding,
        }
        values.update(overrides)
        return FrameConfig(**values)

    def get_logging_config(self) -> Dict[str, Any]:
        """
        로깅 설정을 반환합니다.

        Returns:
            로깅 설정 딕셔너리
        """
        return {
            'module_name': self.logging.module_name,
            'log_file': self.logging.log_file,
            'log_level': self.logging.log_level,
            'backup_days': self.logging.backup_days,
            'enable_console': self.logging.enable_console,
            'enable_file': self.logging.enable_file,
        }

    def validate_config(self) -> bool:
        """
        환경 변수 등으로 바뀐 설정값들을 다시 검증합니다.

        Returns:
            설정이 유효하면 True

        Raises:
            ValueError: 설정값이 잘못된 경우
        """
        self.serial.__post_init__()
        self.frame.__post_init__()
        self.exchange.__post_init__()
        return True

    def __repr__(self) -> str:
        """설정 정보를 문자열로 반환합니다."""
        return (
            f"LineIOConfig(environment={self.environment}, "
            f"baudrate={self.serial.baudrate}, "
            f"timeout={self.exchange.timeout_ms}ms)"
        )


def get_environment() -> str:
    """
    환경 변수에서 실행 환경을 확인하고 반환합니다.

    Returns:
        환경 문자열 (development, testing, production)
    """
    return os.getenv('LINEIO_ENV', 'development').lower()


# 전역 설정 인스턴스
lineio_config = LineIOConfig(config_file=os.getenv('LINEIO_CONFIG_FILE'),
                             environment=get_environment())

# 설정 유효성 검증
lineio_config.validate_config()


def get_lineio_config() -> LineIOConfig:
    """
    전역 LineIO 설정 인스턴스를 반환합니다.

    Returns:
        LineIOConfig 인스턴스
    """
    return lineio_config


def reload_lineio_config(environment: Optional[str] = None,
                         config_file: Optional[str] = None) -> LineIOConfig:
    """
    LineIO 설정을 다시 로드합니다.

    Args:
        environment: 새로운 환경 설정 (None이면 현재 환경 유지)
        config_file: 설정 파일 경로 (None이면 LINEIO_CONFIG_FILE)

    Returns:
        새로 로드된 LineIOConfig 인스턴스
    """
    global lineio_config
    if environment is None:
        environment = lineio_config.environment
    if config_file is None:
        config_file = os.getenv("LINEIO_CONFIG_FILE")
    lineio_config = LineIOConfig(environment=environment, config_file=config_file)
    lineio_config.validate_config()
    return lineio_config


# 편의를 위한 설정 접근 함수들
def get_serial_config(**overrides) -> Dict[str, Any]:
    """시리얼 통신 설정을 반환합니다."""
    return lineio_config.get_serial_config(**overrides)


def get_frame_config(**overrides) -> FrameConfig:
    """라인 프레임 설정을 반환합니다."""
    return lineio_config.get_frame_config(**overrides)


def get_logging_config() -> Dict[str, Any]:
    """로깅 설정을 반환합니다."""
    return lineio_config.get_logging_config()


def get_exchange_timeout() -> float:
    """교환 타임아웃을 반환합니다 (초)."""
    return lineio_config.exchange.timeout
