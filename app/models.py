# app/models.py
from __future__ import annotations
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Boolean, Text
from sqlalchemy.orm import relationship
from app.db import Base
from datetime import datetime

class Driver(Base):
    __tablename__ = "drivers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # relationships
    vehicles = relationship("Vehicle", back_populates="driver", cascade="all,delete-orphan")
    rides = relationship("Ride", back_populates="driver", cascade="all,delete-orphan")
    shifts = relationship("Shift", back_populates="driver", cascade="all,delete-orphan")
    fuel_expenses = relationship("FuelExpense", back_populates="driver", cascade="all,delete-orphan")
    maintenance_expenses = relationship("MaintenanceExpense", back_populates="driver", cascade="all,delete-orphan")
    insurance_expenses = relationship("InsuranceExpense", back_populates="driver", cascade="all,delete-orphan")

class Vehicle(Base):
    __tablename__ = "vehicles"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False)
    make = Column(String(100))
    model = Column(String(100))
    year = Column(String(10))
    license_plate = Column(String(32))
    fuel_type = Column(String(32))  # e.g. "PETROL", "DIESEL", "LPG"

    driver = relationship("Driver", back_populates="vehicles")
    rides = relationship("Ride", back_populates="vehicle")
    shifts = relationship("Shift", back_populates="vehicle")

class Ride(Base):
    __tablename__ = "rides"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    pickup_location = Column(String(255))
    dropoff_location = Column(String(255))
    distance = Column(Float, nullable=True)  # km
    duration = Column(Integer, nullable=True)  # minutes
    fare = Column(Float, nullable=True)
    tips = Column(Float, nullable=True)
    total_earned = Column(Float, nullable=True)
    vehicle_type = Column(String(50))
    notes = Column(Text)

    driver = relationship("Driver", back_populates="rides")
    vehicle = relationship("Vehicle", back_populates="rides")

class Shift(Base):
    __tablename__ = "shifts"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)  # NULL while the shift is open
    start_range = Column(Float, nullable=True)  # remaining range (km) at start
    end_range = Column(Float, nullable=True)
    status = Column(String(16), nullable=False, default="ACTIVE")  # ACTIVE / COMPLETED

    driver = relationship("Driver", back_populates="shifts")
    vehicle = relationship("Vehicle", back_populates="shifts")

class FuelExpense(Base):
    __tablename__ = "fuel_expenses"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=True)
    quantity = Column(Float, nullable=True)  # litres
    fuel_type = Column(String(32))
    odometer_reading = Column(Float, nullable=True)
    full_tank = Column(Boolean, default=True)
    notes = Column(Text)

    driver = relationship("Driver", back_populates="fuel_expenses")
    vehicle = relationship("Vehicle")

class MaintenanceExpense(Base):
    __tablename__ = "maintenance_expenses"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=True)
    service_type = Column(String(100))
    odometer_reading = Column(Float, nullable=True)
    notes = Column(Text)

    driver = relationship("Driver", back_populates="maintenance_expenses")
    vehicle = relationship("Vehicle")

class InsuranceExpense(Base):
    __tablename__ = "insurance_expenses"
    id = Column(Integer, primary_key=True, index=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=True)
    start_date = Column(DateTime, nullable=False, index=True)  # coverage start
    end_date = Column(DateTime, nullable=True)
    amount = Column(Float, nullable=True)  # total premium for the policy period
    monthly_amount = Column(Float, nullable=True)
    payment_cycle = Column(String(16))  # MONTHLY / QUARTERLY / ANNUAL
    provider = Column(String(200))
    policy_number = Column(String(100))
    notes = Column(Text)

    driver = relationship("Driver", back_populates="insurance_expenses")
    vehicle = relationship("Vehicle")
