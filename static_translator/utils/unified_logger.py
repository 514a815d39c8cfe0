"""
Unified logging system for the static site translator.
Provides consistent console output for the CLI and the translation core.
"""
import sys
import os
from datetime import datetime
from typing import Optional, Dict, Any, Callable
from enum import Enum


class LogLevel(Enum):
    """Log levels with priority values"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(Enum):
    """Types of log messages for special handling"""
    GENERAL = "general"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    PROGRESS = "progress"
    TRANSLATION_START = "translation_start"
    TRANSLATION_END = "translation_end"
    ERROR_DETAIL = "error_detail"


class Colors:
    """ANSI color codes for terminal output"""
    NO_COLOR = os.environ.get('NO_COLOR') is not None or not sys.stdout.isatty()

    YELLOW = '' if NO_COLOR else '\033[93m'
    WHITE = '' if NO_COLOR else '\033[97m'
    GRAY = '' if NO_COLOR else '\033[90m'
    CYAN = '' if NO_COLOR else '\033[96m'
    GREEN = '' if NO_COLOR else '\033[92m'
    RED = '' if NO_COLOR else '\033[91m'
    ENDC = '' if NO_COLOR else '\033[0m'

    @classmethod
    def disable(cls):
        """Disable all colors"""
        cls.YELLOW = cls.WHITE = cls.GRAY = cls.CYAN = cls.GREEN = cls.RED = cls.ENDC = ''


class UnifiedLogger:
    """
    Unified logger shared by the CLI, the pipeline and the translation client
    """

    def __init__(self,
                 name: str = "StaticTranslator",
                 console_output: bool = True,
                 enable_colors: bool = True,
                 min_level: LogLevel = LogLevel.INFO,
                 storage_callback: Optional[Callable] = None):
        """
        Initialize the unified logger

        Args:
            name: Logger name/identifier
            console_output: Whether to output to console
            enable_colors: Whether to use colored output
            min_level: Minimum log level to display
            storage_callback: Callback receiving every structured log entry
        """
        self.name = name
        self.console_output = console_output
        self.enable_colors = enable_colors
        self.min_level = min_level
        self.storage_callback = storage_callback

        self.run_state = {
            'completed_tasks': 0,
            'total_tasks': 0,
            'languages': [],
            'model': '',
            'start_time': None,
            'in_progress': False
        }

        if not enable_colors:
            Colors.disable()

    def _format_timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _format_console_message(self, level: LogLevel, message: str,
                                log_type: LogType = LogType.GENERAL,
                                data: Optional[Dict[str, Any]] = None) -> str:
        """Format message for console output"""
        level_colors = {
            LogLevel.DEBUG: Colors.GRAY,
            LogLevel.INFO: Colors.WHITE,
            LogLevel.WARNING: Colors.YELLOW,
            LogLevel.ERROR: Colors.RED,
            LogLevel.CRITICAL: Colors.RED
        }
        color = level_colors.get(level, Colors.WHITE)

        if log_type == LogType.LLM_REQUEST:
            return self._format_llm_request(data or {})
        elif log_type == LogType.LLM_RESPONSE:
            return self._format_llm_response(data or {})
        elif log_type == LogType.PROGRESS:
            return self._format_progress(message, data or {})
        elif log_type == LogType.TRANSLATION_START:
            return self._format_translation_start(data or {})
        elif log_type == LogType.TRANSLATION_END:
            return self._format_translation_end(data or {})
        elif log_type == LogType.ERROR_DETAIL:
            return self._format_error_detail(message, data or {})

        level_str = f"[{level.name}] " if level != LogLevel.INFO else ""
        return f"{color}[{self._format_timestamp()}] {level_str}{message}{Colors.ENDC}"

    def _format_llm_request(self, data: Dict[str, Any]) -> str:
        """Format an outgoing batch request"""
        output = [f"{Colors.YELLOW}{'=' * 80}{Colors.ENDC}",
                  f"{Colors.YELLOW}[{self._format_timestamp()}] SENDING TO LLM{Colors.ENDC}"]
        if 'model' in data:
            output.append(f"{Colors.GRAY}Model: {data['model']}{Colors.ENDC}")
        if 'target_language' in data:
            output.append(f"{Colors.GRAY}Target: {data['target_language']} "
                          f"({data.get('count', '?')} texts){Colors.ENDC}")
        if data.get('system_prompt'):
            output.append(f"{Colors.GRAY}[SYSTEM]{Colors.ENDC}")
            output.append(data['system_prompt'])
        if data.get('user_prompt'):
            output.append(f"{Colors.GRAY}[USER]{Colors.ENDC}")
            output.append(data['user_prompt'])
        return '\n'.join(output)

    def _format_llm_response(self, data: Dict[str, Any]) -> str:
        output = [f"{Colors.GREEN}[{self._format_timestamp()}] LLM RESPONSE{Colors.ENDC}"]
        if 'execution_time' in data:
            output.append(f"{Colors.GRAY}Execution time: {data['execution_time']:.2f} seconds{Colors.ENDC}")
        if self.min_level == LogLevel.DEBUG and 'response' in data:
            output.append(f"{Colors.GREEN}{data['response']}{Colors.ENDC}")
        return '\n'.join(output)

    def _format_progress(self, message: str, data: Dict[str, Any]) -> str:
        """Format a per-task completion line: ✓/✗ file → lang (NN%)"""
        current = data.get('current', self.run_state['completed_tasks'])
        total = data.get('total', self.run_state['total_tasks'])
        percentage = (current / total * 100) if total else 0
        if data.get('success', True):
            mark = f"{Colors.GREEN}✓{Colors.ENDC}"
            tail = f"{Colors.GRAY}({percentage:.0f}%){Colors.ENDC}"
        else:
            mark = f"{Colors.RED}✗{Colors.ENDC}"
            tail = f"{Colors.RED}Failed: {data.get('error', 'unknown error')}{Colors.ENDC}"
        return f"{mark} {Colors.GRAY}{message}{Colors.ENDC} {tail}"

    def _format_translation_start(self, data: Dict[str, Any]) -> str:
        self.run_state.update({
            'languages': data.get('languages', []),
            'model': data.get('model', 'Unknown'),
            'total_tasks': data.get('total_tasks', 0),
            'completed_tasks': 0,
            'start_time': datetime.now(),
            'in_progress': True
        })
        output = [f"{Colors.YELLOW}TRANSLATION STARTED{Colors.ENDC}",
                  f"{Colors.WHITE}Files: {data.get('total_files', 0)}{Colors.ENDC}",
                  f"{Colors.WHITE}Languages: {', '.join(self.run_state['languages'])}{Colors.ENDC}",
                  f"{Colors.GRAY}Model: {self.run_state['model']}{Colors.ENDC}"]
        return '\n'.join(output)

    def _format_translation_end(self, data: Dict[str, Any]) -> str:
        output = [f"\n{Colors.WHITE}TRANSLATION COMPLETE{Colors.ENDC}"]
        stats = data.get('stats', {})
        if stats:
            output.append(f"{Colors.WHITE}Total: {stats.get('total_files', 0)}  "
                          f"Successful: {stats.get('successful_files', 0)}  "
                          f"Cached: {stats.get('cached_files', 0)}{Colors.ENDC}")
            if stats.get('failed_files', 0) > 0:
                output.append(f"{Colors.RED}Failed: {stats['failed_files']}{Colors.ENDC}")
            output.append(f"{Colors.GRAY}Tokens used: {stats.get('total_tokens', 0):,}  "
                          f"Estimated cost: ${stats.get('estimated_cost', 0.0):.4f}  "
                          f"Duration: {stats.get('duration', 0.0):.1f}s{Colors.ENDC}")
        if 'report_path' in data:
            output.append(f"{Colors.GRAY}Report saved to: {data['report_path']}{Colors.ENDC}")
        self.run_state['in_progress'] = False
        return '\n'.join(output)

    def _format_error_detail(self, message: str, data: Dict[str, Any]) -> str:
        output = [f"{Colors.RED}[{self._format_timestamp()}] ERROR: {message}{Colors.ENDC}"]
        if 'details' in data:
            output.append(f"{Colors.RED}Details: {data['details']}{Colors.ENDC}")
        if 'source' in data:
            output.append(f"{Colors.RED}Source: {data['source']} ({data.get('language', '?')}){Colors.ENDC}")
        return '\n'.join(output)

    def log(self, level: LogLevel, message: str,
            log_type: LogType = LogType.GENERAL,
            data: Optional[Dict[str, Any]] = None):
        """
        Main logging method

        Args:
            level: Log level
            message: Log message
            log_type: Type of log for special formatting
            data: Additional data for the log entry
        """
        if level.value < self.min_level.value:
            return

        if log_type == LogType.PROGRESS and self.run_state['in_progress']:
            self.run_state['completed_tasks'] += 1

        if self.console_output:
            try:
                console_msg = self._format_console_message(level, message, log_type, data)
                if console_msg:
                    print(console_msg, flush=True)
            except UnicodeEncodeError:
                safe_message = message.encode('ascii', 'replace').decode('ascii')
                print(f"[{self._format_timestamp()}] {safe_message}", flush=True)

        if self.storage_callback:
            self.storage_callback({
                'timestamp': datetime.now().isoformat(),
                'level': level.name,
                'type': log_type.value,
                'message': message,
                'data': data or {}
            })

    def debug(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.DEBUG, message, log_type, data)

    def info(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.INFO, message, log_type, data)

    def warning(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.WARNING, message, log_type, data)

    def error(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.ERROR, message, log_type, data)

    def critical(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.CRITICAL, message, log_type, data)


# Global logger instance
_global_logger = None


def get_logger(name: str = "StaticTranslator", **kwargs) -> UnifiedLogger:
    """
    Get or create the global logger instance

    Args:
        name: Logger name
        **kwargs: Additional arguments for UnifiedLogger

    Returns:
        UnifiedLogger instance
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = UnifiedLogger(name, **kwargs)
    elif 'storage_callback' in kwargs:
        _global_logger.storage_callback = kwargs['storage_callback']
    return _global_logger


def setup_cli_logger(enable_colors: bool = True, verbose: bool = False) -> UnifiedLogger:
    """Setup logger for CLI usage"""
    # Import here to avoid circular dependencies
    from static_translator.config import DEBUG_MODE

    logger = get_logger(console_output=True, enable_colors=enable_colors)
    logger.min_level = LogLevel.DEBUG if (DEBUG_MODE or verbose) else LogLevel.INFO
    if not enable_colors:
        Colors.disable()
    return logger
