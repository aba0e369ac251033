from extensions import db
from datetime import datetime


class FuelRecord(db.Model):
    __tablename__ = 'fuel_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)  # Litres dispensed
    cost = db.Column(db.Integer, nullable=False)  # Whole currency units
    mileage = db.Column(db.Float, nullable=False)  # Odometer reading (km)
    station = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def price_per_liter(self):
        """Unit price paid at this fill-up"""
        if not self.amount:
            return 0
        return self.cost / self.amount

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'amount': self.amount,
            'cost': self.cost,
            'mileage': self.mileage,
            'station': self.station,
        }

    def __repr__(self):
        return f'<FuelRecord {self.date}: {self.station} - {self.amount}L / {self.cost}>'
