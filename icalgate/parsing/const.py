"""Constants for rfc5545 content line parsing."""

FOLD = r"\r?\n[ \t]"
FOLD_LEN = 75
FOLD_INDENT = " "
LINE_SEP = "\r\n"
WSP = [" ", "\t"]
ATTR_BEGIN = "BEGIN"
ATTR_END = "END"

ATTR_BEGIN_LOWER = "begin"
ATTR_END_LOWER = "end"
