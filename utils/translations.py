"""Chinese labels for rendered pages."""

from typing import Dict

# Page titles and section headers
HEADERS: Dict[str, str] = {
    "list": "小区列表",
    "compare": "小区对比",
    "basic_info": "基本信息",
    "distance": "距离",
    "metro": "地铁",
    "targets": "目标地点",
    "property": "物业与配套",
    "housing_stock": "房产形态",
    "links": "链接",
    "notes": "备注",
    "gallery": "图集",
}

# Field labels
LABELS: Dict[str, str] = {
    "district": "区域",
    "area": "片区",
    "district_area": "区域 / 片区",
    "build_year_range": "建成年份",
    "price_level": "价格等级",
    "ref_wan_per_sqm": "参考单价",
    "ref_total_wan_range": "参考总价",
    "unit_price_column": "参考单价（万/㎡）",
    "total_price_column": "参考总价（万）",
    "unit_price_short": "单价",
    "total_price_short": "总价段",
    "nearest_metro": "最近地铁",
    "has_pool": "泳池",
    "has_kids_playground": "儿童乐园",
    "has_separation_ped_car": "人车分流",
    "amenities": "泳池 / 儿童乐园 / 人车分流",
    "management_fee": "物业费",
    "parking_rent": "停车月租",
    "parking_price": "车位价格",
    "parking_price_column": "车位价格（万）",
    "facilities_note": "备注",
    "total_floors": "总楼层",
    "main_supply": "主供面积段",
    "updated_at": "更新于",
    "tags": "标签",
    "field": "字段",
    "sort": "排序",
    "all": "全部",
}

# Units appended to values
UNITS: Dict[str, str] = {
    "wan_per_sqm": "万/㎡",
    "wan": "万",
}

# Sort option labels
SORT_LABELS: Dict[str, str] = {
    "updated_desc": "最近更新（新到旧）",
    "price_asc": "参考单价（低到高）",
    "metro_asc": "最近地铁距离（近到远）",
    "build_year_desc": "楼龄（新到旧）",
}

# Common phrases
PHRASES: Dict[str, str] = {
    "none": "-",
    "unknown_station": "未知站点",
    "unnamed_building_type": "未命名类型",
    "building_type_missing": "类型未填",
    "no_layout_tags": "无户型标签",
    "target_fallback": "目标地点",
    "distance_with_time": "{distance}m（步行约{walk}分钟 / 骑行约{bike}分钟）",
    "distance_rule": "距离展示规则",
    "no_results": "暂无符合筛选条件的小区",
    "compare_too_few": "对比至少需要 2 个小区，请先回列表页勾选。",
    "compare_limit_reached": "最多只能选择 {limit} 个小区进行对比",
    "compare_need_more": "至少选择 {minimum} 个小区后才能对比",
    "back_to_list": "返回小区列表",
    "target_distance_title": "{name} 距离（m）",
}

# Boolean values
BOOLEAN: Dict[bool, str] = {
    True: "是",
    False: "否",
}
