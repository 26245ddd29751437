"""
English record keys and the Chinese column headers used in the sheets.

Sheets keep Chinese headers for the office staff; records exchanged with
the frontend use the English camelCase keys. Either header language is
accepted when reading.
"""
from collections import OrderedDict

ID_HEADER = '此欄位請勿更動 (ID)'

HEADER_MAP = OrderedDict([
    ('Projects', OrderedDict([
        ('id', ID_HEADER),
        ('sequence', '序號'),
        ('abbreviation', '工程簡稱'),
        ('name', '工程名稱'),
        ('contractNumber', '契約編號'),
        ('contractor', '承攬商'),
        ('coordinatorName', '承辦人員'),
        ('coordinatorEmail', '承辦信箱'),
        ('hostTeam', '主辦工作隊'),
        ('managerName', '部門主管'),
        ('managerEmail', '主管信箱'),
    ])),
    ('Sections', OrderedDict([
        ('id', ID_HEADER),
        ('name', '姓名'),
        ('hostTeam', '工作隊'),
        ('title', '職稱'),
        ('email', '電子信箱'),
    ])),
    ('Violations', OrderedDict([
        ('id', ID_HEADER),
        ('contractorName', '承攬商名稱'),
        ('projectName', '工程名稱'),
        ('violationDate', '違規日期'),
        ('lectureDeadline', '講習期限'),
        ('description', '違規事項'),
        ('status', '辦理進度'),
        ('fileName', '罰單檔名'),
        ('fileUrl', '罰單連結'),
        ('emailCount', '寄信次數'),
        ('documentUrl', '簽辦連結'),
        ('scanFileName', '掃描檔名'),
        ('scanFileUrl', '掃描檔連結'),
        ('scanFilePath', '掃描檔路徑'),
        ('firstNotifyDate', '首次通知日'),
        ('secondNotifyDate', '二次通知日'),
        ('notifyStatus', '通知狀態'),
        ('managerEmail', '主管信箱'),
        ('scanFileHistory', '掃描檔歷程'),
        ('fineAmount', '罰款金額'),
        ('isMajorViolation', '重大違規'),
        ('participants', '參加人員'),
        ('sourceTicketNumber', '來源罰單'),
        ('completionDate', '完成日期'),
    ])),
    ('Fines', OrderedDict([
        ('id', ID_HEADER),
        ('ticketNumber', '罰單編號'),
        ('issueDate', '開單日期'),
        ('projectName', '工程名稱'),
        ('contractor', '承攬商'),
        ('hostTeam', '主辦工作隊'),
        ('violationItem', '違規項目'),
        ('unitPrice', '單價'),
        ('quantity', '數量'),
        ('subtotal', '小計'),
        ('priceChangeReason', '單價修改原因'),
        ('relationship', '關係'),
        ('violatorName', '違規人員'),
        ('issuerName', '開單人員'),
        ('note', '備註'),
        ('violationId', '違規ID'),
    ])),
    ('NotificationLogs', OrderedDict([
        ('id', 'ID'),
        ('violationId', '違規ID'),
        ('notificationType', '通知類型'),
        ('recipientEmail', '收件人信箱'),
        ('recipientRole', '收件人角色'),
        ('sentAt', '發送時間'),
        ('status', '狀態'),
    ])),
    ('Users', OrderedDict([
        ('email', '帳號(Email)'),
        ('password', '密碼'),
        ('name', '姓名'),
        ('role', '權限角色'),
    ])),
])

TABLE_NAMES = list(HEADER_MAP)


def headers_for(table: str) -> list:
    """Chinese header row of a table."""
    return list(HEADER_MAP[table].values())


def key_for_header(table: str, header) -> str:
    """
    Record key of a column header in either language.

    Returns an empty string for columns the table does not know.
    """
    header = str(header or '').strip()
    mapping = HEADER_MAP[table]
    if header in mapping:
        return header
    for key, chinese in mapping.items():
        if chinese == header:
            return key
    return ''
