from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from models.user import User
from models.category import BudgetCategory, BudgetSubcategory, UserCategoryPercentage
from models.income import IncomeSource
from models.expense import ExpenseCategory, Expense
from models.budget import Budget, BudgetIncome, IncomeDeduction, BudgetExpensePlan
from models.template import BudgetTemplate, BudgetTemplateItem
from models.family import FamilyGroup, FamilyMember
