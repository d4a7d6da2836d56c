from app.models.hr.employee import Employee
from app.models.biometric.fingerprint import FingerprintTemplate
