from .histo_tree import HistoTree
from .notice_log import NoticeLog

__all__ = ["HistoTree", "NoticeLog"]
